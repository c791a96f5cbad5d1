"""Request description passed to the failover fetch client."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class ParseMode(StrEnum):
    """How a successful response body is parsed."""

    JSON = "json"
    TEXT = "text"


class FetchRequest(BaseModel):
    """
    A single logical API request, independent of which provider serves it.

    Attributes
    ----------
    path : str
        Endpoint path appended to the provider base URL (e.g., '/thorchain/pools')
    method : str
        HTTP method
    headers : dict[str, str]
        Extra headers, merged over the provider's headers
    cacheable : bool
        Whether the response may be read from and stored in the cache
    bypass_cache : bool
        Skip the cache read but still store the fresh response
    target_height : int | None
        Block height for historical queries
    prefer_secondary : bool
        Try the secondary (more stable) provider first
    parse_as : ParseMode
        Body parsing mode

    """

    model_config = ConfigDict(frozen=True)

    path: str
    method: str = "GET"
    headers: dict[str, str] = Field(default_factory=dict)
    cacheable: bool = True
    bypass_cache: bool = False
    target_height: int | None = Field(default=None, ge=1)
    prefer_secondary: bool = False
    parse_as: ParseMode = ParseMode.JSON

    @property
    def cache_key(self) -> str:
        """Key identifying this request's response in a cache."""
        height = self.target_height if self.target_height is not None else "latest"
        key = f"{self.path}:{height}"
        method = self.method.upper()
        if method != "GET":
            key = f"{method} {key}"
        return key
