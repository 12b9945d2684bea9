import json

from placecheck.core.errors import UpstreamError
from placecheck.jobs import analyze as analyze_job


class DummyServices:
    def __init__(self):
        self.closed = False

    def close(self):
        self.closed = True


def test_build_parser_defaults():
    args = analyze_job.build_parser().parse_args(["https://m.place.naver.com/place/1/home"])
    assert (args.plan, args.depth, args.debug) == ("pro", "standard", False)


def test_main_prints_json(monkeypatch, capsys):
    services = DummyServices()
    seen = {}

    def fake_analyze(request, svc):
        seen["request"] = request
        return {"meta": {"plan": request.plan}, "place": {"name": "라온 헤어"}}

    monkeypatch.setattr(analyze_job, "build_services", lambda: services)
    monkeypatch.setattr(analyze_job, "analyze", fake_analyze)

    code = analyze_job.main(["https://m.place.naver.com/place/1/home", "--plan", "free", "--depth", "deep"])

    assert code == 0
    assert services.closed
    out = capsys.readouterr().out
    assert "라온 헤어" in out
    assert json.loads(out)["meta"]["plan"] == "free"
    assert seen["request"].mode == "place_url"
    assert seen["request"].depth == "deep"


def test_main_returns_error_code(monkeypatch, capsys):
    services = DummyServices()

    def failing(request, svc):
        raise UpstreamError("Timed out rendering")

    monkeypatch.setattr(analyze_job, "build_services", lambda: services)
    monkeypatch.setattr(analyze_job, "analyze", failing)

    assert analyze_job.main(["https://m.place.naver.com/place/1/home"]) == 1
    assert services.closed
    assert capsys.readouterr().out == ""
