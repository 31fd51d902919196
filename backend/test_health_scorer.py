"""Tests for the rule-based health scorer."""

import itertools

import pytest
from pydantic import ValidationError

from recipe_engine.models.health_score import HealthExtras, HealthScore
from recipe_engine.services.health_scorer import HealthScorer
from recipe_engine.utils.constants import GOALS, NEUTRAL_BREAKDOWN


def test_zero_macros_return_neutral_score(scorer):
    result = scorer.score(0, 0, 0, 0, "balanced", HealthExtras())
    assert result.score == 50.0
    assert result.category == "Balanced"
    assert result.breakdown == NEUTRAL_BREAKDOWN
    assert result.advice == []


def test_calories_without_macros_are_still_neutral(scorer):
    assert scorer.score(250, 0, 0, 0).score == 50.0


def test_worked_example(scorer):
    result = scorer.score(500, 40, 50, 15, "balanced")
    assert result.breakdown["macro_balance"] == pytest.approx(30.95)
    assert result.breakdown["protein_bonus"] == 20
    assert result.breakdown["fat_modifier"] == 12
    assert result.breakdown["calorie_density"] == 7
    # a missing inflammatory average counts as zero
    assert result.breakdown["inflammatory_bonus"] == 4
    assert result.breakdown["glycemic_modifier"] == 0
    assert result.score == pytest.approx(73.95)
    assert result.category == "Good"
    assert result.advice == [
        "Macro split is close to the ideal 30/40/30 balance.",
        "Excellent protein content for your goal.",
    ]


@pytest.mark.parametrize("goal", GOALS)
def test_score_always_within_bounds(scorer, goal):
    grid = [0, 1, 15, 60, 250]
    extremes = [
        HealthExtras(),
        HealthExtras(inflam=-10, total_gl=0, fibre=30, iron=20, calcium=900),
        HealthExtras(inflam=10, total_gl=80, fibre=0, iron=0, calcium=0),
    ]
    for protein, carbs, fat, extras in itertools.product(grid, grid, grid, extremes):
        calories = protein * 4 + carbs * 4 + fat * 9
        result = scorer.score(calories, protein, carbs, fat, goal, extras)
        assert 0 <= result.score <= 100


def test_protein_bonus_monotonic_for_muscle_gain(scorer):
    bonuses = [
        scorer.score(600, protein, 60, 20, "muscle_gain").breakdown["protein_bonus"]
        for protein in range(10, 41, 5)
    ]
    assert bonuses == sorted(bonuses)


def test_muscle_gain_needs_more_protein_for_the_same_bonus(scorer):
    assert scorer.score_protein(35, "balanced") == 20
    assert scorer.score_protein(35, "muscle_gain") == 15


def test_weight_loss_calorie_bounds_are_lower(scorer):
    assert scorer.score_calorie_density(450, "balanced") == 10
    assert scorer.score_calorie_density(450, "weight_loss") == 7


@pytest.mark.parametrize("inflam, points", [(-5, 10), (-3, 7), (0, 4), (1, 1), (3, 0)])
def test_inflammatory_bonus_steps(scorer, inflam, points):
    result = scorer.score(500, 30, 50, 15, extras=HealthExtras(inflam=inflam))
    assert result.breakdown["inflammatory_bonus"] == points


@pytest.mark.parametrize("load, penalty", [(35, -5), (25, -3), (15, -1), (5, 0)])
def test_glycemic_penalty_steps(scorer, load, penalty):
    result = scorer.score(500, 30, 50, 15, extras=HealthExtras(total_gl=load))
    assert result.breakdown["glycemic_modifier"] == penalty


def test_micronutrient_bonus_is_capped(scorer):
    assert scorer.score_micronutrients(HealthExtras(fibre=10, iron=5, calcium=500)) == 5
    assert scorer.score_micronutrients(HealthExtras(fibre=6)) == 2
    assert scorer.score_micronutrients(HealthExtras()) == 0


@pytest.mark.parametrize("score, category", [
    (100, "Excellent"),
    (85, "Excellent"),
    (84.99, "Good"),
    (70, "Good"),
    (50, "Balanced"),
    (49.99, "Needs Improvement"),
    (0, "Needs Improvement"),
])
def test_category_thresholds(scorer, score, category):
    assert scorer.assign_category(score) == category


def test_actionable_advice_comes_first(scorer):
    result = scorer.score(900, 5, 10, 90, "weight_loss", HealthExtras(fibre=1))
    assert result.advice[0].startswith("Fat supplies")
    assert len(result.advice) == 4


def test_advice_limit_is_configurable():
    result = HealthScorer(max_advice=2).score(900, 5, 10, 90, "weight_loss", HealthExtras(fibre=1))
    assert len(result.advice) == 2


def test_extra_dependent_advice_needs_the_extra(scorer):
    without = scorer.score(500, 30, 50, 15)
    assert not any("fibre" in tip.lower() for tip in without.advice)
    low_fibre = scorer.score(500, 30, 50, 15, extras=HealthExtras(fibre=1))
    assert any("fibre" in tip.lower() for tip in low_fibre.advice)


def test_scoring_is_deterministic(scorer):
    extras = HealthExtras(inflam=-2.5, total_gl=14, fibre=4, iron=2, calcium=150)
    first = scorer.score(640, 36, 70, 22, "muscle_gain", extras)
    second = scorer.score(640, 36, 70, 22, "muscle_gain", extras)
    assert first == second


def test_health_score_rejects_inconsistent_category():
    with pytest.raises(ValidationError):
        HealthScore(score=90, category="Balanced")
