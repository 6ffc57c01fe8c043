from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class CardMetadata:
    """
    Card data supplied by the external catalog (Scryfall).

    Attributes:
        name: Canonical card name
        prices: Currency code ("usd", "eur", "tix") -> unit price; absent when unpriced
        purchase_uri: Where the card can be viewed or bought
        image_uris: Image size -> URI for single-faced cards
        face_image_uris: Per-face image URIs for multi-faced cards, front first
        set_code: Lowercase set code of this printing
        collector_number: Collector number within the set
    """

    name: str
    prices: dict[str, float] = field(default_factory=dict)
    purchase_uri: str | None = None
    image_uris: dict[str, str] = field(default_factory=dict)
    face_image_uris: tuple[dict[str, str], ...] = field(default_factory=tuple)
    set_code: str = ""
    collector_number: str = ""

    def price_for(self, currency: str) -> float | None:
        """Unit price in the given currency, or None if unpriced."""
        return self.prices.get(currency)

    @property
    def preview_image_uri(self) -> str | None:
        """Large image of the card, or of its front face for double-faced cards."""
        if self.image_uris:
            return self.image_uris.get("large")
        if len(self.face_image_uris) > 1:
            return self.face_image_uris[0].get("large")
        return None
