"""
FastAPI backend for the candidate board
Serves boards and tuning over the stored draw feed
"""
from fastapi import FastAPI, Depends
from fastapi.responses import JSONResponse
from lotto645.core.db import init_db
from lotto645.core.board import BoardService, clamp_int
from lotto645.core.errors import EmptyDatasetError, InvalidParameterError
from lotto645.core.tuner import SqlTunedWeightStore
from lotto645.features.loader import load_dataset
from lotto645.config import (
    logger, DEFAULT_TOTAL_ROUNDS, DEFAULT_CANDIDATE_COUNT, DEFAULT_OBJECTIVE,
    TUNING_SAMPLE_SIZE, K_MIN, K_MAX
)
import os
import threading

# Initialize database
init_db()

app = FastAPI(title="Lotto 6/45 Candidate Board")

_state = {}
_state_lock = threading.Lock()


def get_service():
    """Board service over the stored feed, built on first use"""
    if 'service' not in _state:
        with _state_lock:
            if 'service' not in _state:
                dataset = load_dataset()
                _state['service'] = BoardService(dataset, store=SqlTunedWeightStore())
    return _state['service']


def reload_service():
    with _state_lock:
        _state.clear()


@app.exception_handler(EmptyDatasetError)
def empty_dataset_handler(request, exc):
    logger.error(f"Board unavailable: {exc}")
    return JSONResponse(status_code=503, content={"error": str(exc)})


@app.exception_handler(InvalidParameterError)
def invalid_parameter_handler(request, exc):
    return JSONResponse(status_code=422, content={"error": str(exc)})


@app.get("/")
def health_check():
    """Health check endpoint"""
    return {
        "status": "ok",
        "environment": os.getenv("RAILWAY_ENVIRONMENT", "local")
    }


@app.get("/dataset")
def dataset_summary(service: BoardService = Depends(get_service)):
    return service.dataset.summary()


@app.get("/board")
def get_board(total_rounds: str = str(DEFAULT_TOTAL_ROUNDS),
              target_round: str = None,
              candidate_count: str = str(DEFAULT_CANDIDATE_COUNT),
              objective: str = DEFAULT_OBJECTIVE,
              service: BoardService = Depends(get_service)):
    """Board for a target round; out-of-range inputs are clamped and echoed back"""
    board = service.compute_board(total_rounds, target_round, candidate_count, objective)
    return board.to_dict()


@app.post("/tune")
def tune(k: int, target_hits: int, total_rounds: int = DEFAULT_TOTAL_ROUNDS,
         sample_size: int = TUNING_SAMPLE_SIZE,
         service: BoardService = Depends(get_service)):
    """Run the weight grid search for k and store the winner"""
    k = clamp_int(k, K_MIN, K_MAX, DEFAULT_CANDIDATE_COUNT)
    result = service.tune_weights(k, target_hits, total_rounds, sample_size)
    if result is None:
        return JSONResponse(
            status_code=409,
            content={"error": "Not enough history to backtest with these settings"}
        )
    return {"k": k, "weights": result.weights.as_dict(), "stats": result.stats.as_dict()}


@app.get("/tuned/{k}")
def get_tuned(k: int, service: BoardService = Depends(get_service)):
    result = service.store.get(k)
    if result is None:
        return JSONResponse(status_code=404, content={"error": f"No tuned weights for k={k}"})
    return {"k": k, "weights": result.weights.as_dict(), "stats": result.stats.as_dict()}


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
