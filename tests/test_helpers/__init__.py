from .client_creator import (
    create_test_client,
    TEST_NODE_URL,
    TEST_CONTRACT,
    TEST_PRIV_KEY,
    TEST_CHAIN_TAG,
)

__all__ = ["create_test_client", "TEST_NODE_URL", "TEST_CONTRACT", "TEST_PRIV_KEY", "TEST_CHAIN_TAG"]
