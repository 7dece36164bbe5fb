"""Product data models shared by the catalog, ranking and enrichment stages."""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Fields the content-generation provider must never change.
IDENTITY_FIELDS = (
    "id",
    "image_url",
    "price",
    "product_rating",
    "seller_score",
    "seller_name",
    "delivery_estimate",
    "number_sold",
    "deeplink_url",
    "tax_rate",
    "discount",
)


class Price(BaseModel):
    """Product price in both currencies plus the time the FX rate was applied."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    etb: float = Field(default=0.0, description="Price in Ethiopian birr", ge=0)
    usd: float = Field(default=0.0, description="Price in US dollars", ge=0)
    fx_timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), description="When the USD->ETB rate was applied")


class Product(BaseModel):
    """
    Normalized catalog product.

    Attributes:
        id: Catalog product identifier
        title: Product name/title
        image_url: Main product image URL
        ai_match_percentage: Relevance of the product to the user's query (0-100)
        price: Price in USD and ETB
        product_rating: Product rating (0-5)
        seller_score: Seller reputation (0-100)
        seller_name: Shop or seller name
        delivery_estimate: Free-text delivery estimate from the catalog
        description: Generated or catalog description
        customer_highlights: Short highlights text
        customer_review: Review summary text
        number_sold: Units sold
        summary_bullets: Bullet list produced by enrichment
        deeplink_url: Link to the product page
        tax_rate: Tax rate reported by the catalog
        discount: Discount percentage
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",  # Ignore extra fields during validation
        json_schema_extra={"example": {"id": "33006951782", "title": "Smartphone 128GB", "price": {"usd": 15.9, "etb": 898.35}}},
    )

    id: str = Field(..., description="Catalog product identifier")
    title: str = Field(default="", description="Product name/title")
    image_url: str = Field(default="", description="Main product image URL")
    ai_match_percentage: int = Field(default=0, description="Query relevance (0-100)", ge=0, le=100)
    price: Price = Field(default_factory=Price, description="Price in USD and ETB")

    # Quality signals
    product_rating: float = Field(default=0.0, description="Product rating (0-5)", ge=0, le=5)
    seller_score: int = Field(default=0, description="Seller score (0-100)", ge=0, le=100)
    seller_name: str = Field(default="", description="Shop or seller name")
    number_sold: int = Field(default=0, description="Units sold", ge=0)

    # Logistics
    delivery_estimate: str = Field(default="", description="Delivery estimate")

    # Enrichment fields
    description: str = Field(default="", description="Product description")
    customer_highlights: str = Field(default="", description="Customer highlights")
    customer_review: str = Field(default="", description="Customer review summary")
    summary_bullets: List[str] = Field(default_factory=list, description="Summary bullet points")

    deeplink_url: str = Field(default="", description="Product page URL")
    tax_rate: float = Field(default=0.0, description="Tax rate")
    discount: float = Field(default=0.0, description="Discount percentage")

    def with_identity_of(self, original: "Product") -> "Product":
        """Return a copy of this product carrying the identity fields of ``original``."""
        restored = {name: getattr(original, name) for name in IDENTITY_FIELDS}
        restored["price"] = original.price.model_copy()
        return self.model_copy(update=restored)

    def identity_matches(self, other: "Product") -> bool:
        """Check whether every identity field equals the one on ``other``."""
        return all(getattr(self, name) == getattr(other, name) for name in IDENTITY_FIELDS)

    def to_json(self) -> Dict[str, Any]:
        """Convert to a JSON-serializable camelCase dict."""
        return self.model_dump(mode="json", by_alias=True)


class SearchResult(BaseModel):
    """Ordered search results returned by the search agent."""

    products: List[Product] = Field(default_factory=list)

    def to_json(self) -> Dict[str, Any]:
        return {"products": [product.to_json() for product in self.products]}


class CompareRequest(BaseModel):
    """Request body for product comparison."""

    products: List[Product] = Field(default_factory=list)


class ErrorDetail(BaseModel):
    code: str
    message: str


class Envelope(BaseModel):
    """Stable response envelope used by every endpoint."""

    data: Optional[Any] = None
    error: Optional[ErrorDetail] = None
