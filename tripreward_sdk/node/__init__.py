"""
Node module for the TripReward SDK.

Talks to the REST API of a VeChain Thor node: gas estimation, best block,
transaction submission and receipts.
"""
from .client import NodeClient, validate_node_url, BLOCK_REF_TTL, RECEIPT_ATTEMPTS, RECEIPT_INTERVAL

__all__ = ['NodeClient', 'validate_node_url', 'BLOCK_REF_TTL', 'RECEIPT_ATTEMPTS', 'RECEIPT_INTERVAL']
