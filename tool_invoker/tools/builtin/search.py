"""
Search Tool

A networked tool that proxies a query to a search endpoint and maps the
response to SearchResultItem records.

The endpoint is called with ``GET <endpoint>?q=<query>&limit=<limit>`` and
may answer with either a bare list of items or an object carrying them
under ``results``.

Pattern: Service Proxy (networked tool over a remote search endpoint)
"""

from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from tool_invoker.clients.http import Transport
from tool_invoker.models.domain import ToolCategory
from tool_invoker.schema.adapters import PydanticSchema
from tool_invoker.tools.networked import APIConfig, NetworkedToolAdapter, RequestSpec

DEFAULT_ENDPOINT = "/search"


# =============================================================================
# Models
# =============================================================================


class SearchParams(BaseModel):
    """Parameters of the search tool."""

    query: str = Field(..., min_length=1, description="The search query")
    limit: int = Field(default=10, ge=1, le=100, description="Maximum number of results")


class SearchResultItem(BaseModel):
    """One search hit. Unknown fields returned by the endpoint are kept."""

    id: str
    title: str
    description: Optional[str] = None
    image_url: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("image_url", "imageUrl")
    )

    model_config = ConfigDict(extra="allow")


# =============================================================================
# Tool Factory
# =============================================================================


def _results_from_body(body: Any) -> list[SearchResultItem]:
    items = body.get("results", []) if isinstance(body, dict) else body
    if not isinstance(items, list):
        raise ValueError(f"Unexpected search response: {type(body).__name__}")
    return [SearchResultItem.model_validate(item) for item in items]


def create_search_tool(
    api_config: APIConfig,
    transport: Optional[Transport] = None,
    endpoint: str = DEFAULT_ENDPOINT,
    name: str = "search",
    description: str = "Search for items matching a query.",
    **adapter_options: Any,
) -> NetworkedToolAdapter[SearchParams, list[SearchResultItem]]:
    """
    Create the networked search tool.

    Args:
        api_config: Base URL and resilience policy of the search API.
        transport: Transport collaborator (default: an owned HttpxTransport
            whose client is created on the first request; release it with
            the adapter's aclose()).
        endpoint: Search endpoint path.
        name: Tool name.
        description: Tool description.
        **adapter_options: Observers and sleeper passed to the adapter.

    Returns:
        The adapter; register ``adapter.tool`` to expose it.
    """

    def params_to_request(params: SearchParams) -> RequestSpec:
        return RequestSpec(
            endpoint=endpoint,
            method="GET",
            query_params={"q": params.query, "limit": params.limit},
        )

    return NetworkedToolAdapter(
        name=name,
        description=description,
        api_config=api_config,
        parameters=PydanticSchema(SearchParams),
        params_to_request=params_to_request,
        response_to_result=_results_from_body,
        transport=transport,
        category=ToolCategory.SEARCH,
        **adapter_options,
    )
