"""End-to-end tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from recipe_engine.main import app


@pytest.fixture(scope="module")
def client():
    return TestClient(app)


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "operational"


def test_health_reports_datasets(client):
    body = client.get("/health").json()
    assert body["status"] == "healthy"
    assert body["datasets"]["ingredients"] > 0
    assert body["defaults"]["goal"] == "balanced"


class TestNormalize:
    def test_free_text(self, client):
        response = client.post("/normalize", json={"text": "chicken, rice, no onion, high protein"})
        assert response.status_code == 200
        body = response.json()
        assert body["ingredients"] == ["chicken", "rice"]
        assert body["excluded"] == ["onion"]
        assert body["signals"]["goal"] == "muscle_gain"

    def test_markup_is_rejected(self, client):
        response = client.post("/normalize", json={"text": "<script>alert(1)</script> rice"})
        assert response.status_code == 400


class TestDetectMode:
    def test_dish_typed_in_ingredient_mode(self, client):
        response = client.post("/detect-mode", json={"text": "butter chicken", "mode": "ingredients"})
        body = response.json()
        assert body["mismatch"]["mismatch"] is True
        assert body["should_warn"] is True

    def test_parsed_keys_take_precedence(self, client):
        response = client.post(
            "/detect-mode",
            json={"text": "butter chicken", "ingredients": ["chicken", "rice"], "mode": "ingredients"},
        )
        assert response.json()["should_warn"] is False

    def test_empty_input_has_no_verdict(self, client):
        body = client.post("/detect-mode", json={"text": "", "mode": "dish"}).json()
        assert body == {"mismatch": None, "should_warn": False}


class TestGenerate:
    def test_recipe(self, client):
        response = client.post("/generate", json={
            "ingredients": ["chicken", "rice", "garlic", "spinach"],
            "goal": "muscle_gain",
            "servings": 2,
        })
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert 0 <= body["health"]["score"] <= 100
        assert body["cost"]["servings"] == 2
        assert body["steps"][0].startswith("PREP:")

    def test_empty_result_is_422(self, client):
        response = client.post("/generate", json={"ingredients": ["milk"], "dietary": "vegan"})
        assert response.status_code == 422
        body = response.json()
        assert "vegan" in body["detail"]
        assert body["result"]["status"] == "empty"
        assert body["result"]["removed"] == ["milk"]

    def test_invalid_goal_is_rejected(self, client):
        response = client.post("/generate", json={"ingredients": ["rice"], "goal": "bulking"})
        assert response.status_code == 422


def test_optimize_respects_ceiling(client):
    response = client.post("/optimize", json={
        "ingredients": ["chicken", "rice", "garlic", "spinach"],
        "max_cost_per_serving": 20,
    })
    assert response.status_code == 200
    body = response.json()
    assert body["is_optimized"] is True
    assert body["cost_after"] <= 20
    assert body["optimization_changes"]


def test_dishes_filter_by_meal_and_time(client):
    response = client.get("/dishes", params={"cuisine": "India-South", "meal_type": "breakfast", "max_prep_minutes": 25})
    assert response.status_code == 200
    assert response.json() == {"dishes": ["dosa", "upma"], "count": 2}


def test_score(client):
    response = client.post("/score", json={"calories": 500, "protein": 40, "carbs": 50, "fat": 15})
    assert response.status_code == 200
    body = response.json()
    assert body["score"] == pytest.approx(73.95)
    assert body["category"] == "Good"


def test_score_rejects_negative_macros(client):
    response = client.post("/score", json={"calories": 500, "protein": -1, "carbs": 50, "fat": 15})
    assert response.status_code == 422


def test_recipe_history(client):
    recipe = client.post("/generate", json={"ingredients": ["paneer", "spinach"]}).json()
    saved = client.post("/recipes", json=recipe).json()
    assert saved["title"] == recipe["title"]
    assert saved["ingredients"] == ["paneer", "spinach"]
    assert saved["health_score"] == recipe["health"]["score"]

    history = client.get("/recipes").json()
    assert saved["id"] in [entry["id"] for entry in history]
