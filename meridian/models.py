"""
Boundary request models.

Validate operator input before it reaches the control plane: identifiers
shaped like public keys, non-negative integer amounts, enumerated strings
mapped to internal enums, and fixed-length hex fields zero-filled when
absent. ``to_kwargs()`` yields the arguments of the matching operation.

``parse_request`` turns pydantic validation failures into the control
plane's own ``InvalidConfiguration`` so callers see one error type.
"""

import re
from typing import Annotated, Any, Dict, Optional, Type, TypeVar

from pydantic import AfterValidator, BaseModel, Field, ValidationError, field_validator

from .errors import InvalidConfiguration
from .issuance import CollateralType, IssuerType, StablecoinPreset
from .registry import Jurisdiction, KycLevel
from .util import (
    KYC_HASH_LENGTH,
    REDEMPTION_INFO_LENGTH,
    REFERENCE_LENGTH,
    fixed_bytes,
)

RequestT = TypeVar("RequestT", bound=BaseModel)

# base58, 32-44 characters
_PUBKEY_RE = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$")


def _pubkey(value: str) -> str:
    if not isinstance(value, str) or not _PUBKEY_RE.match(value):
        raise ValueError("must be a base58 public key")
    return value


PublicKey = Annotated[str, AfterValidator(_pubkey)]


def _hex_field(value: Optional[str], length: int, name: str) -> bytes:
    try:
        return fixed_bytes(value, length, name)
    except InvalidConfiguration as e:
        raise ValueError(str(e))


def _enum(cls, value):
    try:
        return cls.parse(value)
    except InvalidConfiguration as e:
        raise ValueError(str(e))


class WhitelistRequest(BaseModel):
    wallet: PublicKey
    kyc_level: KycLevel
    jurisdiction: Jurisdiction
    kyc_hash: str
    daily_limit: int = Field(default=0, ge=0)
    expiry_timestamp: int

    @field_validator("kyc_level", mode="before")
    @classmethod
    def _kyc_level(cls, v):
        return _enum(KycLevel, v)

    @field_validator("jurisdiction", mode="before")
    @classmethod
    def _jurisdiction(cls, v):
        return _enum(Jurisdiction, v)

    @field_validator("kyc_hash")
    @classmethod
    def _kyc_hash(cls, v):
        if not v:
            raise ValueError("kyc_hash is required")
        _hex_field(v, KYC_HASH_LENGTH, "kyc_hash")
        return v

    def to_kwargs(self) -> Dict[str, Any]:
        return {
            "wallet": self.wallet,
            "kyc_level": self.kyc_level,
            "jurisdiction": self.jurisdiction,
            "kyc_hash": _hex_field(self.kyc_hash, KYC_HASH_LENGTH, "kyc_hash"),
            "daily_limit": self.daily_limit,
            "expiry_timestamp": self.expiry_timestamp,
        }


class BlacklistRequest(BaseModel):
    wallet: PublicKey
    reason: str = Field(default="", max_length=256)

    def to_kwargs(self) -> Dict[str, Any]:
        return {"wallet": self.wallet, "reason": self.reason}


class InitializeRequest(BaseModel):
    authority: PublicKey
    mint: PublicKey
    preset: StablecoinPreset = StablecoinPreset.SSS_1
    decimals: int = Field(default=2, ge=0, le=255)
    treasury: Optional[PublicKey] = None
    enable_permanent_delegate: Optional[bool] = None
    enable_transfer_hook: Optional[bool] = None
    default_account_frozen: Optional[bool] = None

    @field_validator("preset", mode="before")
    @classmethod
    def _preset(cls, v):
        return _enum(StablecoinPreset, v)

    def to_kwargs(self) -> Dict[str, Any]:
        return self.model_dump()


class InitializeVaultRequest(BaseModel):
    collateral_type: CollateralType = CollateralType.FIAT
    auditor: Optional[PublicKey] = None

    @field_validator("collateral_type", mode="before")
    @classmethod
    def _collateral_type(cls, v):
        return _enum(CollateralType, v)

    def to_kwargs(self) -> Dict[str, Any]:
        return self.model_dump()


class CollateralRequest(BaseModel):
    amount: int = Field(ge=0)
    proof_hash: Optional[str] = None

    @field_validator("proof_hash")
    @classmethod
    def _proof_hash(cls, v):
        _hex_field(v, KYC_HASH_LENGTH, "proof_hash")
        return v

    def to_kwargs(self) -> Dict[str, Any]:
        return {"amount": self.amount, "proof_hash": _hex_field(self.proof_hash, KYC_HASH_LENGTH, "proof_hash")}


class RegisterIssuerRequest(BaseModel):
    authority: PublicKey
    issuer_type: IssuerType
    daily_mint_limit: int = Field(default=0, ge=0)
    daily_burn_limit: int = Field(default=0, ge=0)

    @field_validator("issuer_type", mode="before")
    @classmethod
    def _issuer_type(cls, v):
        return _enum(IssuerType, v)

    def to_kwargs(self) -> Dict[str, Any]:
        return self.model_dump()


class MintRequest(BaseModel):
    issuer: PublicKey
    recipient: PublicKey
    amount: int = Field(ge=0)
    reference: Optional[str] = None

    @field_validator("reference")
    @classmethod
    def _reference(cls, v):
        _hex_field(v, REFERENCE_LENGTH, "reference")
        return v

    def to_kwargs(self) -> Dict[str, Any]:
        return {
            "issuer": self.issuer,
            "recipient": self.recipient,
            "amount": self.amount,
            "reference": _hex_field(self.reference, REFERENCE_LENGTH, "reference"),
        }


class BurnRequest(BaseModel):
    issuer: PublicKey
    holder: PublicKey
    amount: int = Field(ge=0)
    redemption_info: Optional[str] = None

    @field_validator("redemption_info")
    @classmethod
    def _redemption_info(cls, v):
        _hex_field(v, REDEMPTION_INFO_LENGTH, "redemption_info")
        return v

    def to_kwargs(self) -> Dict[str, Any]:
        return {
            "issuer": self.issuer,
            "holder": self.holder,
            "amount": self.amount,
            "redemption_info": _hex_field(self.redemption_info, REDEMPTION_INFO_LENGTH, "redemption_info"),
        }


class SeizeRequest(BaseModel):
    authority: PublicKey
    source: PublicKey
    treasury: PublicKey
    amount: int = Field(default=0, ge=0)
    reason: str = Field(default="", max_length=32)

    def to_kwargs(self) -> Dict[str, Any]:
        return self.model_dump()


def parse_request(model: Type[RequestT], data: Any) -> RequestT:
    """Validate ``data`` as ``model``, raising ``InvalidConfiguration`` on failure."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        problems = [
            "{}: {}".format(".".join(str(part) for part in err["loc"]) or model.__name__, err["msg"])
            for err in e.errors()
        ]
        raise InvalidConfiguration(
            f"Invalid {model.__name__}: {e.error_count()} error(s)",
            {"request": model.__name__, "errors": problems},
        )
