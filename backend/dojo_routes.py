from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse
from models import AIMoveRequest, IntegrityRequest
from services.board import Board
from services.difficulty_service import AIConfiguration, difficulty_service
from services.integrity_service import detect_account_sharing, integrity_service
from services.errors import ConfigurationError
from services.levels import GAME_LEVELS, get_level
import logging

# Set up logging
logger = logging.getLogger(__name__)

# Create a router for the dojo's AI and anti-cheat endpoints
dojo_router = APIRouter(prefix="/tic-tac-toe", tags=["tic-tac-toe"])


def build_configuration(request: AIMoveRequest) -> AIConfiguration:
    """
    Resolve the AI configuration for a move request

    An explicit configuration wins; otherwise it comes from the level table,
    whose board size must match the request's.
    """
    if request.configuration is not None:
        config = request.configuration
        return AIConfiguration(
            level=config.level,
            optimal_play_percentage=config.optimal_play_percentage,
            strategy=config.strategy,
            max_depth=difficulty_service.resolve_depth(config.max_depth, request.grid_size),
            current_wins=config.current_wins,
        )

    level_data = get_level(request.level)
    if level_data.grid_size != request.grid_size:
        raise ConfigurationError(
            f"Level {request.level} is played on a {level_data.grid_size}x{level_data.grid_size} board, "
            f"got grid size {request.grid_size}"
        )
    return difficulty_service.build_configuration(request.level, request.wins)


@dojo_router.post("/ai-move")
def ai_move(move_data: AIMoveRequest):
    """Calculate the AI's next move for the given board"""
    try:
        board = Board.create(move_data.board, move_data.grid_size)
        config = build_configuration(move_data)
        move = difficulty_service.choose_move(board, config, move_data.ai_symbol, move_data.human_symbol)
    except ValueError as e:
        logger.warning(f"⚠️ TIC-TAC-TOE INVALID AI MOVE REQUEST | Error: {str(e)}")
        raise HTTPException(status_code=400, detail=str(e))

    logger.info(
        f"🤖 TIC-TAC-TOE AI MOVE - Level {config.level} | Position: {move.position} | {move.reasoning}"
    )
    return JSONResponse(content={
        "position": move.position,
        "confidence": move.confidence,
        "reasoning": move.reasoning,
        "level": config.level,
        "strategy": config.strategy,
        "optimalPlayPercentage": config.optimal_play_percentage,
        "maxDepth": config.max_depth,
    })


@dojo_router.post("/validate")
def validate_game(game_data: IntegrityRequest):
    """Check a finished game's move history against its final board"""
    history = [move.to_record() for move in game_data.move_history]
    report = integrity_service.validate_game_integrity(game_data.final_board, history, game_data.grid_size)

    result = report.to_dict()
    result["clientWarnings"] = detect_account_sharing(history)

    if report.is_valid:
        logger.info(f"🛡️ TIC-TAC-TOE INTEGRITY CHECK - Valid | Risk: {report.risk_score}")
    else:
        logger.warning(
            f"🚨 TIC-TAC-TOE INTEGRITY CHECK - {len(report.violations)} violations | Risk: {report.risk_score}"
        )
    return JSONResponse(content=result)


@dojo_router.get("/levels")
def list_levels():
    """Return the level table"""
    return JSONResponse(content={"levels": [level.to_dict() for level in GAME_LEVELS]})
