import pytest

from models.data_models import Row, TranslationResult
from models.errors import TranslationFailed
from services.engines import TranslationEngine
from services.row_grouping import group_fragments
from services.translation_orchestrator import build_overlays, collect_requests, translate_all


class FakeEngine(TranslationEngine):
    def __init__(self, mapping=None, reverse=False, omit=(), error=None):
        self.mapping = mapping or {}
        self.reverse = reverse
        self.omit = set(omit)
        self.error = error
        self.calls = []

    def translate_batch(self, texts, target_language):
        self.calls.append((list(texts), target_language))
        if self.error:
            raise self.error
        results = [
            TranslationResult(source=t, translated=self.mapping.get(t, t.upper()))
            for t in texts if t not in self.omit
        ]
        return list(reversed(results)) if self.reverse else results


def row(frag, text, price=None, non_linguistic=False, top=0.1):
    return Row(fragments=[frag(text, top=top)], text=text, price=price, non_linguistic=non_linguistic)


def test_item_with_price_keeps_price_verbatim(frag):
    rows = group_fragments([frag("Margherita Pizza", x=0.1), frag("$12.50", x=0.7, w=0.1)])
    engine = FakeEngine({"Margherita Pizza": "Pizza Margarita"})

    outcome = translate_all(rows, engine, "es")

    assert engine.calls == [(["Margherita Pizza"], "es")]
    [display] = outcome.display_rows
    assert display.original == "Margherita Pizza  $12.50"
    assert display.translated == "Pizza Margarita  $12.50"
    assert outcome.error is None


def test_price_only_rows_never_reach_the_engine(frag):
    rows = group_fragments([frag("¥1,200")])
    engine = FakeEngine()

    outcome = translate_all(rows, engine, "en")

    assert engine.calls == []
    assert outcome.requested == []
    [display] = outcome.display_rows
    assert display.original == display.translated == "¥1,200"
    assert display.skipped


def test_split_amount_and_currency_code_is_not_requested(frag):
    rows = group_fragments([frag("12", x=0.1, w=0.1), frag("USD", x=0.3, w=0.1)])
    engine = FakeEngine()

    outcome = translate_all(rows, engine, "es")

    assert collect_requests(rows) == []
    assert engine.calls == []
    assert outcome.display_rows[0].translated == "12 USD"


def test_duplicate_text_requested_once_but_reassembled_per_row(frag):
    rows = [row(frag, "Coffee", "$3", top=0.1), row(frag, "Tea", top=0.2), row(frag, "Coffee", "$4", top=0.3)]
    engine = FakeEngine({"Coffee": "Café", "Tea": "Té"})

    outcome = translate_all(rows, engine, "es")

    assert engine.calls == [(["Coffee", "Tea"], "es")]
    assert [d.translated for d in outcome.display_rows] == ["Café  $3", "Té", "Café  $4"]
    assert [d.row for d in outcome.display_rows] == rows


def test_results_joined_by_source_not_position(frag):
    rows = [row(frag, "Soup", top=0.1), row(frag, "Bread", top=0.2), row(frag, "Wine", top=0.3)]
    engine = FakeEngine({"Soup": "Sopa", "Bread": "Pan", "Wine": "Vino"}, reverse=True)

    outcome = translate_all(rows, engine, "es")

    assert [d.translated for d in outcome.display_rows] == ["Sopa", "Pan", "Vino"]


def test_omitted_result_falls_back_to_original(frag):
    rows = [row(frag, "Soup", "$5", top=0.1), row(frag, "Bread", top=0.2)]
    engine = FakeEngine({"Bread": "Pan"}, omit={"Soup"})

    outcome = translate_all(rows, engine, "es")

    assert [d.translated for d in outcome.display_rows] == ["Soup  $5", "Pan"]
    assert outcome.error is None


def test_unrequested_results_are_ignored(frag):
    class ChattyEngine(FakeEngine):
        def translate_batch(self, texts, target_language):
            return [TranslationResult("Extra", "Extra!")] + super().translate_batch(texts, target_language)

    outcome = translate_all([row(frag, "Soup")], ChattyEngine({"Soup": "Sopa"}), "es")

    assert [d.translated for d in outcome.display_rows] == ["Sopa"]


def test_batch_failure_empties_translations_and_reports_once(frag):
    rows = [row(frag, "Soup", top=0.1), row(frag, "12", non_linguistic=True, top=0.2)]
    engine = FakeEngine(error=RuntimeError("quota exceeded"))

    outcome = translate_all(rows, engine, "es")

    assert len(engine.calls) == 1
    assert [d.translated for d in outcome.display_rows] == ["", ""]
    assert [d.original for d in outcome.display_rows] == ["Soup", "12"]
    assert isinstance(outcome.error, TranslationFailed)
    assert "quota exceeded" in outcome.error.user_message


def test_translation_failed_from_engine_is_not_rewrapped(frag):
    original = TranslationFailed(RuntimeError("offline"))
    outcome = translate_all([row(frag, "Soup")], FakeEngine(error=original), "es")

    assert outcome.error is original


def test_mixed_rows_skip_only_non_linguistic(frag):
    rows = [row(frag, "Menu", top=0.1), row(frag, "$7 - $9", non_linguistic=True, top=0.2)]
    engine = FakeEngine({"Menu": "Carta"})

    outcome = translate_all(rows, engine, "es")

    assert engine.calls == [(["Menu"], "es")]
    assert outcome.display_rows[1].translated == outcome.display_rows[1].original == "$7 - $9"


def test_collect_requests_preserves_first_seen_order(frag):
    rows = [row(frag, "B"), row(frag, "A"), row(frag, "B"), row(frag, "", non_linguistic=True)]
    assert collect_requests(rows) == ["B", "A"]


def test_overlays_follow_rows_and_fall_back_to_original(frag):
    rows = group_fragments([frag("Soup", x=0.1, top=0.1), frag("$5", x=0.7, top=0.1, w=0.1)])
    outcome = translate_all(rows, FakeEngine(error=RuntimeError("down")), "es")

    [overlay] = build_overlays(outcome.display_rows)

    assert overlay.translated == "Soup  $5"
    assert overlay.bounding_box.x == pytest.approx(0.1)
    assert overlay.bounding_box.width == pytest.approx(0.7)
