import pytest

from placecheck.extract.cascade import Cascade, ExtractionContext, Strategy, StrategyResult
from placecheck.models import FetchedDocument


class FixedStrategy(Strategy):
    def __init__(self, name, items=None, exc=None):
        self.name = name
        self.items = items
        self.exc = exc
        self.calls = 0

    def attempt(self, ctx):
        self.calls += 1
        if self.exc is not None:
            raise self.exc
        return StrategyResult(items=self.items, debug={"from": self.name})


def make_document(text="<html></html>", frame_urls=None, url="https://m.place.naver.com/place/1/home"):
    return FetchedDocument(url=url, final_url=url, status=200, text=text, frame_urls=frame_urls or [])


@pytest.fixture
def ctx():
    return ExtractionContext(make_document())


def test_first_non_empty_strategy_wins_and_stops(ctx):
    first = FixedStrategy("embedded", [])
    second = FixedStrategy("frames", ["a"])
    third = FixedStrategy("network", ["b"])

    result = Cascade("keywords", [first, second, third], list).run(ctx)

    assert result.items == ["a"]
    assert result.strategy == "frames"
    assert result.found
    assert third.calls == 0
    assert [(attempt.strategy, attempt.outcome) for attempt in result.trail] == [
        ("embedded", "empty"),
        ("frames", "hit"),
    ]
    assert result.trail[1].count == 1
    assert result.trail[1].detail == {"from": "frames"}


def test_failing_strategy_falls_through(ctx):
    broken = FixedStrategy("embedded", exc=RuntimeError("boom"))
    fallback = FixedStrategy("label_text", ["x", "y"])

    result = Cascade("menus", [broken, fallback], list).run(ctx)

    assert result.items == ["x", "y"]
    assert result.trail[0].outcome == "error"
    assert result.trail[0].detail == {"error": "boom"}


def test_results_are_never_merged(ctx):
    result = Cascade(
        "keywords", [FixedStrategy("embedded", ["a"]), FixedStrategy("network", ["b", "c"])], list
    ).run(ctx)
    assert result.items == ["a"]


def test_validation_can_reject_a_result(ctx):
    validate = lambda items: [item for item in items or [] if item != "bad"]  # noqa: E731
    result = Cascade(
        "keywords", [FixedStrategy("embedded", ["bad"]), FixedStrategy("network", ["good"])], validate
    ).run(ctx)
    assert result.items == ["good"]
    assert result.trail[0].outcome == "empty"


def test_exhausted_cascade_returns_empty_value(ctx):
    result = Cascade("description", [FixedStrategy("embedded", None)], lambda value: value, empty=lambda: None).run(ctx)

    assert result.items is None
    assert result.strategy is None
    assert not result.found
    assert len(result.trail) == 1


def test_context_trail_collects_every_signal(ctx):
    Cascade("a", [FixedStrategy("embedded", ["x"])], list).run(ctx)
    Cascade("b", [FixedStrategy("embedded", []), FixedStrategy("network", [])], list).run(ctx)
    assert [(attempt.signal, attempt.strategy) for attempt in ctx.trail] == [
        ("a", "embedded"),
        ("b", "embedded"),
        ("b", "network"),
    ]


def test_frame_urls_are_deduped_and_bounded():
    html = '<iframe src="https://b.example/frame"></iframe><iframe src="https://a.example/frame"></iframe>'
    document = make_document(
        html, frame_urls=["https://a.example/frame", "about:blank", "https://m.place.naver.com/place/1/home"]
    )

    assert ExtractionContext(document).frame_urls() == ["https://a.example/frame", "https://b.example/frame"]
    assert ExtractionContext(document, max_frames=1).frame_urls() == ["https://a.example/frame"]


def test_frame_documents_are_fetched_once_and_failures_recorded():
    calls = []

    def fetcher(url):
        calls.append(url)
        if "bad" in url:
            raise RuntimeError("frame timeout")
        return make_document("<p>frame</p>", url=url)

    document = make_document(frame_urls=["https://good.example/f", "https://bad.example/f"])
    context = ExtractionContext(document, fetcher=fetcher)

    frames = context.frame_documents()
    context.frame_documents()

    assert [url for url, _ in frames] == ["https://good.example/f"]
    assert calls == ["https://good.example/f", "https://bad.example/f"]
    assert context.frame_errors == {"https://bad.example/f": "frame timeout"}


def test_frame_documents_without_fetcher():
    document = make_document(frame_urls=["https://a.example/frame"])
    assert ExtractionContext(document).frame_documents() == []
