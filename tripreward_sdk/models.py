"""
Data models for the TripReward SDK.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AbiInput(BaseModel):
    """A single input parameter of a contract function"""
    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str = ""
    type: str


class FunctionDescriptor(BaseModel):
    """A contract function selected from a parsed ABI"""
    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str
    inputs: List[AbiInput] = Field(default_factory=list)
    type: str = "function"

    @property
    def input_types(self) -> List[str]:
        return [i.type for i in self.inputs]


class Clause(BaseModel):
    """One recipient/value/data unit of a transaction"""
    model_config = ConfigDict(frozen=True)

    to: Optional[str]
    value: int = 0
    data: str = "0x"

    @field_validator("value")
    @classmethod
    def _non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("clause value must be non-negative")
        return v

    def to_json(self) -> Dict[str, Any]:
        """Clause in the JSON shape the node API accepts."""
        return {"to": self.to, "value": hex(self.value), "data": self.data}


class UnsignedTransaction(BaseModel):
    """Transaction body in signing order"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    chain_tag: int = Field(..., alias="chainTag", ge=0, le=0xFF)
    block_ref: str = Field(..., alias="blockRef")
    expiration: int = Field(..., ge=0)
    clauses: List[Clause]
    gas_price_coef: int = Field(..., alias="gasPriceCoef", ge=0, le=0xFF)
    gas: int = Field(..., ge=0)
    depends_on: Optional[str] = Field(None, alias="dependsOn")
    nonce: int = Field(..., ge=0, lt=2 ** 64)
    reserved: List[Any] = Field(default_factory=list)


class Signature(BaseModel):
    """secp256k1 signature split into its RLP components"""
    model_config = ConfigDict(frozen=True)

    r: bytes
    s: bytes
    v: int = Field(..., ge=0, le=1)

    @field_validator("r", "s")
    @classmethod
    def _word(cls, value: bytes) -> bytes:
        if len(value) != 32:
            raise ValueError("signature component must be 32 bytes")
        return value

    def to_bytes(self) -> bytes:
        """65-byte ``r || s || v`` form."""
        return self.r + self.s + bytes([self.v])


class Receipt(BaseModel):
    """Transaction receipt returned by the node"""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: Optional[str] = None
    reverted: bool = False
    gas_used: Optional[int] = Field(None, alias="gasUsed")
    gas_payer: Optional[str] = Field(None, alias="gasPayer")
    outputs: List[Dict[str, Any]] = Field(default_factory=list)
    meta: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("reverted", mode="before")
    @classmethod
    def _null_means_success(cls, v: Any) -> Any:
        return False if v is None else v

    @property
    def tx_id(self) -> Optional[str]:
        return self.id or self.meta.get("txID")

    @property
    def block_number(self) -> Optional[int]:
        return self.meta.get("blockNumber")
