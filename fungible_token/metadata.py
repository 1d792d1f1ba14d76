"""
Token Metadata Module

Static descriptive information about the token. The record is fixed when
the provider is constructed and never mutated afterwards.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

from .config import TokenConfig

FT_METADATA_SPEC = "ft-1.0.0"


@dataclass(frozen=True)
class TokenMetadata:
    """
    Immutable token description in the NEP-148 shape
    """
    spec: str
    name: str
    symbol: str
    decimals: int
    icon: Optional[str] = None
    reference: Optional[str] = None
    reference_hash: Optional[str] = None

    def __post_init__(self):
        if not self.spec:
            raise ValueError("Metadata spec cannot be empty")
        if not self.name or not self.name.strip():
            raise ValueError("Token name cannot be empty")
        if not self.symbol or not self.symbol.strip():
            raise ValueError("Token symbol cannot be empty")
        if isinstance(self.decimals, bool) or not isinstance(self.decimals, int):
            raise ValueError(f"Token decimals must be int, got {type(self.decimals).__name__}")
        if not 0 <= self.decimals <= 255:
            raise ValueError(f"Token decimals must be between 0 and 255, got {self.decimals}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary with every field present, None included"""
        return asdict(self)


class MetadataProvider:
    """Returns the metadata record set at construction"""

    def __init__(self, metadata: TokenMetadata):
        self._metadata = metadata

    def metadata(self) -> TokenMetadata:
        return self._metadata

    @classmethod
    def from_config(cls, config: TokenConfig) -> 'MetadataProvider':
        """Build the provider from the token_* configuration fields"""
        return cls(TokenMetadata(
            spec=config.token_spec,
            name=config.token_name,
            symbol=config.token_symbol,
            decimals=config.token_decimals,
            icon=config.token_icon,
            reference=config.token_reference,
            reference_hash=config.token_reference_hash,
        ))
