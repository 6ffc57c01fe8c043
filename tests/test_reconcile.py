import pytest

from deckledger.analysis.reconcile import (
    format_price,
    get_card_price,
    reconcile,
    resolve_collection_numbers,
)
from deckledger.config import UNKNOWN_CARD, DecklistSettings
from deckledger.models.card import CardMetadata
from deckledger.models.failure import ContractViolationError, FailureKind
from deckledger.models.line import CardByNumberLine, CardLine
from deckledger.models.reconciliation import ListMode, ReconciliationResult, SyncEntry
from deckledger.parsers.decklist import parse_lines, parse_text


def run(
    raw: list[str],
    ledger: dict[str, int],
    catalog: dict[str, CardMetadata] | None = None,
    **options: object,
) -> ReconciliationResult:
    """Parse and reconcile a decklist."""
    return reconcile(
        parse_lines(raw, ledger),
        catalog or {},
        ledger,
        DecklistSettings(**options),  # type: ignore[arg-type]
    )


class TestScenarios:
    def test_single_card_without_ledger(self) -> None:
        result = run(["4 Lightning Bolt"], {})

        assert [s.name for s in result.sections] == ["Deck:"]
        section = result.sections[0]
        entry = section.entries[0]
        assert entry.kind == "card"
        assert entry.count == 4
        assert entry.owned is None
        assert entry.deficit == 0
        assert section.summary.total_count == 4
        assert section.missing_card_counts == {}
        assert result.missing_card_counts == {}
        assert result.buylist is None

    def test_sideboard_deficit(self, card_catalog: dict[str, CardMetadata]) -> None:
        result = run(["Sideboard:", "2 Negate"], {"negate": 1}, card_catalog)

        assert [s.name for s in result.sections] == ["Sideboard:"]
        section = result.sections[0]
        entry = section.entries[0]
        assert entry.owned == 1
        assert entry.deficit == 1
        assert entry.is_insufficient
        assert section.missing_card_counts == {"negate": 1}
        assert result.missing_card_counts == {"negate": 1}

    def test_collection_number_not_found(self) -> None:
        lines = parse_lines(["# set=war", "5"], {})
        assert lines[1] == CardByNumberLine(number="5", set_code="war")

        result = reconcile(lines, {}, {}, DecklistSettings(), ListMode.COLLECTION)

        section = result.section("Collection: ")
        assert section is not None
        card_entries = [e for e in section.entries if e.kind == "card"]
        assert len(card_entries) == 1
        assert card_entries[0].name == "Card not found (war/5)"
        assert card_entries[0].unit_price is None
        assert section.summary.total_cost == 0.0
        assert section.summary.total_count == 1

    def test_card_with_comment(self) -> None:
        result = run(["3 Shock # great removal"], {})

        entry = result.sections[0].entries[0]
        assert entry.name == "Shock"
        assert entry.count == 3
        assert entry.comments == (" great removal",)
        assert entry.errors == ()

    def test_whitespace_only(self) -> None:
        result = run(["   "], {})

        section = result.sections[0]
        assert [e.kind for e in section.entries] == ["blank"]
        assert section.summary.total_count == 0
        assert section.summary.total_cost == 0.0
        assert result.missing_card_counts == {}


class TestSections:
    def test_default_section_when_first_line_is_not_header(self) -> None:
        result = run(["1 Shock", "Sideboard:", "1 Negate"], {})

        assert [s.name for s in result.sections] == ["Deck:", "Sideboard:"]
        assert result.sections[1].entries[0].name == "Negate"

    def test_no_default_section_when_first_line_is_header(self) -> None:
        result = run(["Main", "1 Shock"], {})

        assert [s.name for s in result.sections] == ["Main"]

    def test_headers_are_not_entries(self) -> None:
        result = run(["Main", "1 Shock", "", "# note"], {})

        assert [e.kind for e in result.sections[0].entries] == ["card", "blank", "comment"]

    def test_repeated_headers_merge(self) -> None:
        """A header seen again reopens its section instead of starting a new one."""
        result = run(["Main", "1 Shock", "Side", "1 Opt", "Main", "2 Negate"], {})

        assert [s.name for s in result.sections] == ["Main", "Side"]
        main = result.sections[0]
        assert [e.name for e in main.entries] == ["Shock", "Negate"]
        assert main.summary.total_count == 3

    def test_crlf_header_names_section(self) -> None:
        result = reconcile(parse_text("Sideboard\r\n2 Negate\r\n", {}), {}, {})

        assert [s.name for s in result.sections] == ["Sideboard"]

    def test_collection_default_section(self) -> None:
        result = reconcile(parse_lines(["1 Shock"], {}), {}, {}, mode=ListMode.COLLECTION)

        assert [s.name for s in result.sections] == ["Collection: "]

    def test_empty_input_has_no_sections(self) -> None:
        result = reconcile([], {}, {})

        assert result.sections == []

    def test_error_lines_surface_as_warnings(self) -> None:
        result = run(["4x Bolt", "2 Negate", "3 # ?"], {})

        section = result.sections[0]
        assert section.entries[0].kind == "error"
        assert section.warnings == [
            "invalid line: 4x Bolt",
            "Unable to parse card name from: 3 # ?",
        ]
        assert section.summary.total_count == 5


class TestDeficits:
    def test_repeated_lines_accumulate(self) -> None:
        result = run(["2 Negate", "2 Negate"], {"negate": 1})

        assert result.sections[0].missing_card_counts == {"negate": 2}
        assert result.missing_card_counts == {"negate": 2}

    def test_missing_counts_across_sections(
        self, sample_decklist: str, card_catalog: dict[str, CardMetadata]
    ) -> None:
        ledger = {"negate": 1, "lightning bolt": 4}
        result = reconcile(parse_text(sample_decklist, ledger), card_catalog, ledger)

        deck, side = result.sections
        assert deck.missing_card_counts == {"negate": 1, "shock": 3}
        assert side.missing_card_counts == {"negate": 1, "mystery card": 1}
        assert result.missing_card_counts == {"negate": 2, "shock": 3, "mystery card": 1}

    def test_section_missing_equals_sum_of_deficits(self, sample_decklist: str) -> None:
        ledger = {"negate": 1, "shock": 1}
        result = reconcile(parse_text(sample_decklist, ledger), {}, ledger)

        for section in result.sections:
            assert section.missing_count == sum(e.deficit for e in section.entries)

    def test_owned_enough_has_no_deficit(self) -> None:
        result = run(["2 Negate"], {"negate": 4})

        entry = result.sections[0].entries[0]
        assert entry.deficit == 0
        assert result.missing_card_counts == {}

    def test_zero_count_never_missing(self, card_catalog: dict[str, CardMetadata]) -> None:
        result = run(["0 Negate"], {"shock": 1}, card_catalog)

        section = result.sections[0]
        assert section.entries[0].owned == 0
        assert section.entries[0].deficit == 0
        assert section.summary.total_count == 0
        assert section.summary.total_cost == 0.0
        assert result.missing_card_counts == {}

    def test_no_ledger_disables_tracking(
        self, sample_decklist: str, card_catalog: dict[str, CardMetadata]
    ) -> None:
        result = reconcile(parse_text(sample_decklist, {}), card_catalog, {})

        for section in result.sections:
            assert all(entry.owned is None for entry in section.entries)
            assert section.missing_card_counts == {}
        assert result.missing_card_counts == {}
        assert result.buylist is None

    def test_ledger_without_card_means_zero_owned(self) -> None:
        """A non-empty ledger that lacks the card means none are owned."""
        result = run(["3 Shock"], {"negate": 1})

        entry = result.sections[0].entries[0]
        assert entry.owned == 0
        assert entry.deficit == 3

    def test_bare_number_in_decklist_mode_is_unresolved(self) -> None:
        result = run(["# set=war", "5"], {"negate": 1})

        entry = result.sections[0].entries[1]
        assert entry.kind == "card"
        assert entry.count == 1
        assert entry.display_name == UNKNOWN_CARD
        assert entry.deficit == 0
        assert result.missing_card_counts == {}


class TestPricing:
    def test_section_total_cost(self, card_catalog: dict[str, CardMetadata]) -> None:
        result = run(["4 Lightning Bolt", "3 Shock", "1 Mystery Card"], {}, card_catalog)

        section = result.sections[0]
        assert section.summary.total_count == 8
        assert section.summary.total_cost == pytest.approx(6.3)
        assert section.entries[0].unit_price == 1.5
        assert section.entries[0].total_price == pytest.approx(6.0)
        assert section.entries[2].unit_price is None
        assert section.entries[2].total_price is None
        assert result.prices_shown

    def test_deficit_amounts(self, card_catalog: dict[str, CardMetadata]) -> None:
        result = run(["4 Lightning Bolt"], {"lightning bolt": 1}, card_catalog)

        section = result.sections[0]
        entry = section.entries[0]
        assert entry.deficit == 3
        assert entry.amount_owned == pytest.approx(1.5)
        assert entry.total_price == pytest.approx(6.0)
        assert section.summary.has_missing
        assert section.summary.total_count == 4
        assert section.summary.owned_count == 1
        assert section.summary.total_cost == pytest.approx(6.0)
        assert section.summary.owned_cost == pytest.approx(1.5)

    def test_summary_without_missing(self, card_catalog: dict[str, CardMetadata]) -> None:
        result = run(["2 Negate"], {"negate": 2}, card_catalog)

        summary = result.sections[0].summary
        assert not summary.has_missing
        assert summary.owned_count == summary.total_count == 2
        assert summary.owned_cost == summary.total_cost == pytest.approx(0.5)

    def test_hide_prices(self, card_catalog: dict[str, CardMetadata]) -> None:
        result = run(["4 Lightning Bolt"], {"negate": 1}, card_catalog, hide_prices=True)

        section = result.sections[0]
        assert section.entries[0].unit_price is None
        assert section.entries[0].amount_owned is None
        assert section.summary.total_cost == 0.0
        assert not result.prices_shown
        assert result.buylist is not None
        assert result.buylist.total_cost == 0.0

    def test_preferred_currency(self, card_catalog: dict[str, CardMetadata]) -> None:
        result = run(["1 Lightning Bolt", "1 Negate"], {}, card_catalog, preferred_currency="eur")

        bolt, negate = result.sections[0].entries
        assert bolt.unit_price == 1.25
        assert negate.unit_price is None
        assert result.currency == "eur"
        assert result.currency_symbol == "€"
        assert result.sections[0].summary.total_cost == pytest.approx(1.25)

    def test_no_catalog_hides_prices(self) -> None:
        result = run(["1 Lightning Bolt"], {})

        assert not result.prices_shown

    def test_get_card_price_by_name_or_id(self, card_catalog: dict[str, CardMetadata]) -> None:
        options = DecklistSettings()

        assert get_card_price("Lightning Bolt", card_catalog, options) == 1.5
        assert get_card_price("lightning bolt", card_catalog, options) == 1.5
        assert get_card_price("Unknown", card_catalog, options) is None

    def test_format_price(self) -> None:
        assert format_price(1.5, "usd") == "$1.50"
        assert format_price(0.2, "eur") == "€0.20"
        assert format_price(0.05, "tix") == "Tx0.05"


class TestDisplayFields:
    def test_catalog_name_and_links(self, card_catalog: dict[str, CardMetadata]) -> None:
        result = run(["4 lightning bolt"], {}, card_catalog)

        entry = result.sections[0].entries[0]
        assert entry.display_name == "Lightning Bolt"
        assert entry.link_uri == "https://scryfall.com/card/leb/163/lightning-bolt"
        assert entry.image_uri == "https://img.example/bolt-large.jpg"

    def test_links_and_previews_disabled(self, card_catalog: dict[str, CardMetadata]) -> None:
        result = run(
            ["4 Lightning Bolt"],
            {},
            card_catalog,
            show_card_names_as_hyperlinks=False,
            show_card_previews=False,
        )

        entry = result.sections[0].entries[0]
        assert entry.link_uri is None
        assert entry.image_uri is None

    def test_unknown_card_uses_parsed_name(self) -> None:
        result = run(["1 Mystery Card", "2 # ?"], {})

        mystery, nameless = result.sections[0].entries
        assert mystery.display_name == "Mystery Card"
        assert nameless.display_name == UNKNOWN_CARD


class TestBuylist:
    def test_consolidates_missing_cards(
        self, sample_decklist: str, card_catalog: dict[str, CardMetadata]
    ) -> None:
        ledger = {"negate": 1, "lightning bolt": 4}
        result = reconcile(parse_text(sample_decklist, ledger), card_catalog, ledger)

        buylist = result.buylist
        assert buylist is not None
        assert [(e.card_id, e.quantity) for e in buylist.entries] == [
            ("negate", 2),
            ("shock", 3),
            ("mystery card", 1),
        ]
        assert buylist.total_count == 6
        assert buylist.total_cost == pytest.approx(2 * 0.25 + 3 * 0.1)

    def test_unknown_cards_listed_by_id(self, card_catalog: dict[str, CardMetadata]) -> None:
        result = run(["1 Mystery Card"], {"negate": 1}, card_catalog)

        assert result.buylist is not None
        entry = result.buylist.entries[0]
        assert not entry.is_known
        assert entry.label == "mystery card"
        assert entry.cost == 0.0
        assert result.buylist.to_text() == "1 mystery card\n"

    def test_nameless_card_uses_unknown_marker(self) -> None:
        result = run(["2 # ?"], {"negate": 1})

        assert result.buylist is not None
        assert result.buylist.entries[0].label == UNKNOWN_CARD

    def test_text_uses_catalog_names(self, card_catalog: dict[str, CardMetadata]) -> None:
        result = run(["2 negate", "4 Lightning Bolt"], {"shock": 1}, card_catalog)

        assert result.buylist is not None
        assert result.buylist.to_text() == "2 Negate\n4 Lightning Bolt\n"
        assert result.buylist.total_cost == pytest.approx(0.5 + 6.0)

    def test_disabled_by_setting(self, card_catalog: dict[str, CardMetadata]) -> None:
        result = run(["2 Negate"], {"negate": 1}, card_catalog, show_buylist=False)

        assert result.missing_card_counts == {"negate": 1}
        assert result.buylist is None

    def test_absent_without_missing_cards(self, card_catalog: dict[str, CardMetadata]) -> None:
        result = run(["2 Negate"], {"negate": 2}, card_catalog)

        assert result.buylist is None


class TestCollectionMode:
    @pytest.fixture
    def cards_by_set_number(
        self, card_catalog: dict[str, CardMetadata]
    ) -> dict[str, dict[str, CardMetadata]]:
        return {"war": {"144": card_catalog["shock"]}}

    def test_resolves_numbers(
        self, cards_by_set_number: dict[str, dict[str, CardMetadata]]
    ) -> None:
        ledger = {"shock": 1}
        lines = parse_lines(["# set=war", "144", "144", "999"], ledger)

        result = reconcile(
            lines,
            {},
            ledger,
            mode=ListMode.COLLECTION,
            cards_by_set_number=cards_by_set_number,
        )

        cards = [e for e in result.sections[0].entries if e.kind == "card"]
        assert [e.name for e in cards] == ["Shock", "Shock", "Card not found (war/999)"]
        assert [e.owned for e in cards] == [1, 1, 0]
        assert cards[0].unit_price == 0.1
        assert cards[0].set_code == "war"
        assert cards[0].collector_number == "144"
        assert result.missing_card_counts == {"card not found (war/999)": 1}
        assert result.prices_shown
        assert result.sync_entries == [SyncEntry("war", "144", 2)]

    def test_accepts_mode_string(
        self, cards_by_set_number: dict[str, dict[str, CardMetadata]]
    ) -> None:
        lines = parse_lines(["# set=war", "144"], {})

        result = reconcile(
            lines, {}, {}, mode="collection", cards_by_set_number=cards_by_set_number
        )

        assert result.mode is ListMode.COLLECTION
        assert result.sections[0].entries[1].owned is None

    def test_resolve_collection_numbers(
        self, cards_by_set_number: dict[str, dict[str, CardMetadata]]
    ) -> None:
        lines = parse_lines(["# set=war", "144", "2 Negate"], {})

        resolved, card_data_by_id = resolve_collection_numbers(lines, cards_by_set_number, {})

        assert resolved[1] == CardLine(
            count=1, name="Shock", global_count=None, set_code="war", collector_number="144"
        )
        assert resolved[2] == lines[2]
        assert list(card_data_by_id) == ["shock"]

    def test_decklist_mode_has_no_sync_entries(self, card_catalog: dict[str, CardMetadata]) -> None:
        result = run(["1 Shock"], {}, card_catalog)

        assert result.sync_entries == []


class TestDeterminism:
    def test_reconcile_twice_is_identical(
        self, sample_decklist: str, card_catalog: dict[str, CardMetadata]
    ) -> None:
        ledger = {"negate": 1}
        lines = parse_text(sample_decklist, ledger)

        first = reconcile(lines, card_catalog, ledger)
        second = reconcile(lines, card_catalog, ledger)

        assert first == second

    def test_inputs_not_mutated(self, card_catalog: dict[str, CardMetadata]) -> None:
        lines = parse_lines(["# set=war", "144"], {})
        catalog = dict(card_catalog)

        reconcile(
            lines,
            catalog,
            {},
            mode=ListMode.COLLECTION,
            cards_by_set_number={"war": {"144": card_catalog["shock"]}},
        )

        assert catalog == card_catalog
        assert lines[1] == CardByNumberLine(number="144", set_code="war")


class TestContract:
    def test_none_lines(self) -> None:
        with pytest.raises(ContractViolationError):
            reconcile(None, {}, {})  # type: ignore[arg-type]

    def test_none_catalog(self) -> None:
        with pytest.raises(ContractViolationError):
            reconcile([], None, {})  # type: ignore[arg-type]

    def test_none_ledger(self) -> None:
        with pytest.raises(ContractViolationError):
            reconcile([], {}, None)  # type: ignore[arg-type]

    def test_unknown_mode(self) -> None:
        with pytest.raises(ContractViolationError, match="unsupported mode"):
            reconcile([], {}, {}, mode="binder")

    def test_unexpected_line(self) -> None:
        with pytest.raises(ContractViolationError):
            reconcile(["4 Lightning Bolt"], {}, {})  # type: ignore[list-item]

    def test_negative_ledger_count(self) -> None:
        """A negative owned count would turn into a negative deficit, so it is refused."""
        with pytest.raises(ContractViolationError, match="non-negative") as exc_info:
            reconcile(parse_lines(["1 Shock"], {}), {}, {"shock": -2})

        assert exc_info.value.kind == FailureKind.INVALID_INPUT
