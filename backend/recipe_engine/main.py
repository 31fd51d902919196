"""
FastAPI application entry point and endpoint definitions.

This module initializes the FastAPI application and exposes the recipe
engine over HTTP.

Responsibilities:
- Initialize FastAPI application with CORS and error handling
- Load the reference datasets and wire the service layer once at start-up
- Map engine results to responses (EmptyResult becomes HTTP 422)
- Keep the in-memory history of generated recipes
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional
import logging
import uuid

from fastapi import FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from recipe_engine.config import settings
from recipe_engine.models.health_score import HealthScore
from recipe_engine.models.input import NormalizedInput
from recipe_engine.models.recipe import (
    DetectModeRequest,
    EmptyResult,
    NormalizeRequest,
    OptimizeRequest,
    RecipeContext,
    ScoreRequest,
    SynthesisResult,
)
from recipe_engine.services.cost_aggregator import CostAggregator
from recipe_engine.services.health_scorer import HealthScorer
from recipe_engine.services.input_normalizer import InputNormalizer, NegationRules
from recipe_engine.services.kitchen_guide import KitchenGuide
from recipe_engine.services.nutrition_aggregator import NutritionAggregator
from recipe_engine.services.recipe_synthesizer import RecipeSynthesizer
from recipe_engine.services.reference_data import load_reference_data
from recipe_engine.services.substitution_optimizer import SubstitutionOptimizer
from recipe_engine.utils.validators import validate_free_text

# Configure logging
logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """
    Initialize and configure the FastAPI application.

    Sets up:
    - CORS middleware for frontend communication
    - Exception handlers for consistent error responses
    - Application metadata

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    app = FastAPI(
        title="Recipe Synthesis & Optimization API",
        description="Turns free-text ingredients into scored, priced recipes and cheaper or healthier variants",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc"
    )

    # Configure CORS to allow frontend communication
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000", "http://localhost:5173", "http://localhost:8080", "http://127.0.0.1:8080"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Global exception handler for consistent error responses
    @app.exception_handler(Exception)
    async def global_exception_handler(request, exc):
        """
        Handle all uncaught exceptions with consistent error format.

        Args:
            request: The incoming request object
            exc: The exception that was raised

        Returns:
            JSONResponse: Formatted error response
        """
        logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": "Internal server error occurred",
                "error": str(exc)
            }
        )

    return app


# Initialize FastAPI application
app = create_app()

# Reference data is validated here; a broken dataset stops start-up
reference_data = load_reference_data(settings.DATA_DIR)

# Initialize service layer instances
nutrition_aggregator = NutritionAggregator(reference_data, settings.UNKNOWN_INGREDIENT_QTY)
cost_aggregator = CostAggregator(reference_data, nutrition_aggregator, settings.UNKNOWN_INGREDIENT_COST)
health_scorer = HealthScorer(settings.MAX_ADVICE)
kitchen_guide = KitchenGuide(reference_data, settings.MAX_SUGGESTIONS, settings.MAX_MISTAKES)
recipe_synthesizer = RecipeSynthesizer(
    reference_data,
    nutrition_aggregator,
    cost_aggregator,
    health_scorer,
    kitchen_guide,
    default_goal=settings.DEFAULT_GOAL,
    default_location=settings.DEFAULT_LOCATION,
    default_spice=settings.DEFAULT_SPICE,
    default_skill=settings.DEFAULT_SKILL,
    default_servings=settings.DEFAULT_SERVINGS,
)
substitution_optimizer = SubstitutionOptimizer(recipe_synthesizer)
input_normalizer = InputNormalizer(
    reference_data,
    NegationRules.from_settings(settings),
    settings.FUZZY_MAX_DISTANCE,
)

# In-memory recipe history (resets on restart)
recipe_history: List[Dict] = []


def _recipe_response(result: SynthesisResult):
    """Return a Recipe as-is; turn an EmptyResult into a 422 JSON body."""
    if isinstance(result, EmptyResult):
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "detail": result.reason,
                "result": result.model_dump(),
            }
        )
    return result


@app.get("/")
async def root():
    """
    Root endpoint - API health check.

    Returns:
        dict: API status message
    """
    return {
        "message": "Recipe Synthesis & Optimization API",
        "version": "1.0.0",
        "status": "operational"
    }


@app.get("/health")
async def health_check():
    """
    Health check endpoint for monitoring and deployment.

    Returns:
        dict: Service status and reference dataset row counts
    """
    return {
        "status": "healthy",
        "service": "recipe-engine-api",
        "datasets": reference_data.summary(),
        "defaults": {
            "goal": settings.DEFAULT_GOAL,
            "location": settings.DEFAULT_LOCATION,
            "servings": settings.DEFAULT_SERVINGS,
        },
    }


@app.post("/normalize", response_model=NormalizedInput)
async def normalize_input(request: NormalizeRequest):
    """
    Normalize free text into canonical ingredient keys.

    Args:
        request: Free text such as "2 cups basmati rice, no onion"

    Returns:
        NormalizedInput: Ingredients, exclusions, signals and unknown words

    Raises:
        HTTPException: 400 if the text is too long or contains markup
    """
    try:
        validate_free_text(request.text, settings.MAX_INPUT_LENGTH)
        result = input_normalizer.normalize(request.text)
        logger.info(
            f"Normalized input: {len(result.ingredients)} ingredients, "
            f"{len(result.excluded)} excluded, {len(result.unknown)} unknown"
        )
        return result
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Error normalizing input: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to normalize input: {str(e)}"
        )


@app.post("/detect-mode")
async def detect_mode(request: DetectModeRequest):
    """
    Check whether the input looks like the other entry mode.

    Returns:
        dict: ``mismatch`` (ModeMismatch or null) and ``should_warn``, true
            only for a mismatch at or above the configured confidence
    """
    try:
        if request.ingredients is not None:
            parsed = request.ingredients
        else:
            validate_free_text(request.text, settings.MAX_INPUT_LENGTH)
            parsed = input_normalizer.normalize(request.text)

        mismatch = input_normalizer.detect_mismatch(parsed, request.mode)
        should_warn = (
            mismatch is not None
            and mismatch.mismatch
            and mismatch.confidence >= settings.MISMATCH_CONFIDENCE_THRESHOLD
        )
        return {"mismatch": mismatch, "should_warn": should_warn}
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Error detecting input mode: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to detect input mode: {str(e)}"
        )


@app.post("/generate")
async def generate_recipe(context: RecipeContext):
    """
    Synthesize a recipe from a recipe context.

    Args:
        context: Normalized ingredient keys plus goal, location and preferences

    Returns:
        Recipe: The synthesized recipe, or a 422 body with the EmptyResult
            when nothing survives exclusions and the dietary filter
    """
    try:
        result = recipe_synthesizer.synthesize(context)
        return _recipe_response(result)
    except Exception as e:
        logger.error(f"Error generating recipe: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to generate recipe: {str(e)}"
        )


@app.post("/optimize")
async def optimize_recipe(request: OptimizeRequest):
    """
    Synthesize a recipe, then improve it by greedy substitution.

    Args:
        request: Recipe context plus an optional per-serving cost ceiling

    Returns:
        Recipe: Optimized recipe with its change log, or a 422 body with the
            EmptyResult
    """
    try:
        result = substitution_optimizer.optimize(request, request.max_cost_per_serving)
        return _recipe_response(result)
    except Exception as e:
        logger.error(f"Error optimizing recipe: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to optimize recipe: {str(e)}"
        )


@app.post("/score", response_model=HealthScore)
async def score_meal(request: ScoreRequest):
    """
    Score a meal directly from its macro totals.

    Args:
        request: Calories, protein, carbs, fat, optional goal and extras

    Returns:
        HealthScore: Score, category, breakdown, advice and macro ratios
    """
    try:
        return health_scorer.score(
            request.calories,
            request.protein,
            request.carbs,
            request.fat,
            request.goal or settings.DEFAULT_GOAL,
            request.extras,
        )
    except Exception as e:
        logger.error(f"Error scoring meal: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to score meal: {str(e)}"
        )


@app.get("/dishes")
async def find_dishes(
    cuisine: Optional[str] = None,
    meal_type: Optional[str] = None,
    dietary: Optional[str] = None,
    max_prep_minutes: Optional[int] = None,
):
    """
    List known dishes matching the given filters.

    Args:
        cuisine: Location or sub-region, e.g. "India" or "India-South"
        meal_type: breakfast / lunch / dinner / snack / dessert
        dietary: Dietary tag the dish must carry
        max_prep_minutes: Upper bound on preparation time

    Returns:
        dict: Matching dish keys and their count
    """
    try:
        dishes = reference_data.find_dishes(cuisine, meal_type, dietary, max_prep_minutes)
        logger.info(f"Found {len(dishes)} dishes for cuisine={cuisine} meal_type={meal_type}")
        return {"dishes": dishes, "count": len(dishes)}
    except Exception as e:
        logger.error(f"Error finding dishes: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to find dishes: {str(e)}"
        )


# ==================== Recipe History Endpoints ====================

@app.post("/recipes")
async def save_recipe(recipe_data: Dict):
    """
    Save a generated recipe to the history.

    Args:
        recipe_data: Recipe body as returned by /generate or /optimize

    Returns:
        dict: Saved history entry with its ID
    """
    try:
        health = recipe_data.get("health") or {}
        cost = recipe_data.get("cost") or {}
        saved_recipe = {
            "id": str(uuid.uuid4()),
            "title": recipe_data.get("title", "Untitled Recipe"),
            "health_score": health.get("score"),
            "category": health.get("category"),
            "cost_per_serving": cost.get("total_per_serving"),
            "ingredients": [
                item.get("key") for item in recipe_data.get("ingredients", [])
                if isinstance(item, dict)
            ],
            "is_optimized": recipe_data.get("is_optimized", False),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        recipe_history.append(saved_recipe)
        logger.info(f"Saved recipe: {saved_recipe['title']}")
        return saved_recipe
    except Exception as e:
        logger.error(f"Error saving recipe: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to save recipe: {str(e)}"
        )


@app.get("/recipes")
async def get_recipes():
    """
    Get all saved recipes, oldest first.

    Returns:
        list: Saved history entries
    """
    logger.info(f"Fetching {len(recipe_history)} recipes")
    return recipe_history


if __name__ == "__main__":
    import uvicorn

    # Run the application
    # For development only - use uvicorn command in production
    uvicorn.run(
        "recipe_engine.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
