import pytest
from fastapi.testclient import TestClient

import main
from conftest import PAIEMENT_TEXTS, PAYMENT_TEXTS


def _write_config(tmp_path, corpus_path, model_path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        "logging:\n"
        "  level: WARNING\n"
        "data:\n"
        "  source: csv\n"
        f"  path: {corpus_path}\n"
        "model:\n"
        f"  path: {model_path}\n"
        "  version: test-v1\n",
        encoding="utf-8",
    )
    return config_path


@pytest.fixture(scope="module")
def client(tmp_path_factory):
    """Create a test client whose startup calibrates from a small CSV corpus."""
    tmp_path = tmp_path_factory.mktemp("api")
    corpus_path = tmp_path / "swift.csv"
    rows = ["SWIFT,Category,Language"]
    for english, french in zip(PAYMENT_TEXTS * 2, PAIEMENT_TEXTS * 2):
        rows.append(f'"{english}",1,1')
        rows.append(f'"{french}",2,2')
    corpus_path.write_text("\n".join(rows) + "\n", encoding="utf-8")

    config_path = _write_config(tmp_path, corpus_path, tmp_path / "missing.joblib")
    monkeypatch = pytest.MonkeyPatch()
    monkeypatch.setenv("SWIFT_CLASSIFIER_CONFIG", str(config_path))
    with TestClient(main.app) as c:
        yield c
    monkeypatch.undo()


class TestHealthEndpoint:
    def test_health_returns_ok(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["model_loaded"] is True
        assert data["model_version"] == "test-v1"


class TestClassifyEndpoint:
    def test_classify_returns_all_fields(self, client):
        response = client.post("/classify", json={"text": "payment transfer now"})

        assert response.status_code == 200
        data = response.json()

        assert data["category"] == 1
        assert data["language"] == 1
        assert set(data["probabilities"]) == {"1", "2"}
        assert data["probabilities"]["1"] > data["probabilities"]["2"]
        assert "processing_time_ms" in data
        assert data["model_version"] == "test-v1"

    def test_classify_french(self, client):
        response = client.post("/classify", json={"text": "Paiement virement au compte"})

        assert response.status_code == 200
        assert response.json()["category"] == 2
        assert response.json()["language"] == 2

    def test_classify_unknown_language(self, client):
        response = client.post("/classify", json={"text": "zzz 123"})

        assert response.status_code == 200
        assert response.json()["language"] == 0

    def test_classify_missing_text(self, client):
        response = client.post("/classify", json={})
        assert response.status_code == 422


class TestPatternsEndpoint:
    def test_returns_top_patterns(self, client):
        response = client.get("/patterns", params={"top": 2})

        assert response.status_code == 200
        patterns = response.json()["patterns"]
        assert set(patterns) == {"1", "2"}
        assert all(len(ranked) == 2 for ranked in patterns.values())

    def test_negative_top_rejected(self, client):
        response = client.get("/patterns", params={"top": -1})
        assert response.status_code == 422


class TestModelNotLoaded:
    def test_health_and_classify_return_503(self, tmp_path, monkeypatch):
        config_path = _write_config(tmp_path, tmp_path / "no-corpus.csv", tmp_path / "none.joblib")
        monkeypatch.setenv("SWIFT_CLASSIFIER_CONFIG", str(config_path))

        with TestClient(main.app) as c:
            assert c.get("/health").status_code == 503
            assert c.post("/classify", json={"text": "payment"}).status_code == 503


class TestLoadsExportedModel:
    def test_startup_uses_existing_bundle(self, tmp_path, monkeypatch, interleaved_corpus):
        from classifier.config import Settings, build_combiner

        model_path = tmp_path / "combined.joblib"
        combiner = build_combiner(Settings())
        combiner.calibrate(interleaved_corpus)
        combiner.save(str(model_path))

        config_path = _write_config(tmp_path, tmp_path / "no-corpus.csv", model_path)
        monkeypatch.setenv("SWIFT_CLASSIFIER_CONFIG", str(config_path))

        with TestClient(main.app) as c:
            response = c.post("/classify", json={"text": "payment transfer now"})
            assert response.status_code == 200
            assert response.json()["category"] == 1
