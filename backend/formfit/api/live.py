"""
Live exercise websocket.

One connection drives one ExercisePipeline. The client streams pose frames
produced by its estimator; every event the pipeline emits is pushed back as
JSON right after the frame that caused it.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from formfit.config import get_settings
from formfit.cv.events import EVENT_NAMES
from formfit.cv.pipeline import EXERCISE_NAMES, ExerciseMode, ExercisePipeline, create_pipeline
from formfit.cv.rep_scorer import load_template
from formfit.database import AsyncSessionLocal
from formfit.history import SessionHistoryStore
from formfit.schemas.live import FrameMessage

logger = logging.getLogger(__name__)

router = APIRouter()


async def _save_session(pipeline: ExercisePipeline) -> Optional[str]:
    """Persist the pipeline's session if it has any repetitions."""
    summary = pipeline.summary()
    if summary["reps"] == 0:
        return None

    async with AsyncSessionLocal() as db:
        session = await SessionHistoryStore(db).append(summary)
    return session.id


@router.websocket("/{mode}")
async def live_session(websocket: WebSocket, mode: str):
    """
    Real-time repetition counting.

    Client messages:
    - {"type": "frame", "timestamp": s, "landmarks": [...]}
    - {"type": "no_frame"}: the estimator produced nothing for this frame
    - {"type": "stop"}: end of capture; the session is saved
    - {"type": "reset"}: start over without saving
    - {"type": "debug"}: dump the recent-frame buffer
    """
    await websocket.accept()

    try:
        exercise_mode = ExerciseMode.parse(mode)
    except ValueError as e:
        logger.warning(f"Rejected live session: {e}")
        await websocket.send_json({"type": "error", "message": str(e)})
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    settings = get_settings()
    template = None
    if exercise_mode == ExerciseMode.PUSHUPS:
        template = load_template(settings.pushup_template_path)

    pipeline = create_pipeline(exercise_mode, template=template, settings=settings)

    # Emitter callbacks are synchronous; queue events and flush after each message
    outbox: List[Dict[str, Any]] = []
    for event_name in EVENT_NAMES:
        pipeline.emitter.subscribe(event_name, lambda event: outbox.append(event.to_dict()))

    await websocket.send_json({
        "type": "connected",
        "mode": exercise_mode.value,
        "exercise_name": EXERCISE_NAMES[exercise_mode],
    })

    try:
        while True:
            raw = await websocket.receive_text()
            try:
                message = json.loads(raw)
            except ValueError:
                await websocket.send_json({"type": "error", "message": "Message is not valid JSON"})
                continue

            msg_type = message.get("type") if isinstance(message, dict) else None

            if msg_type == "frame":
                try:
                    frame = FrameMessage.model_validate(message).to_frame()
                except ValidationError as e:
                    await websocket.send_json({
                        "type": "error",
                        "message": f"Invalid frame: {e.error_count()} validation error(s)"
                    })
                    continue
                pipeline.process_frame(frame)

            elif msg_type == "no_frame":
                pipeline.process_frame(None)

            elif msg_type == "stop":
                pipeline.stop()
                summary = pipeline.summary()
                try:
                    session_id = await _save_session(pipeline)
                except SQLAlchemyError:
                    logger.exception(f"Could not save {exercise_mode.value} session")
                    # Session is kept so a later stop can retry
                    await websocket.send_json({
                        "type": "error",
                        "message": "Could not save session",
                        "session_id": None,
                    })
                    continue
                # Saved; the next capture starts a fresh session
                pipeline.reset()
                await websocket.send_json({
                    "type": "stopped",
                    "summary": summary,
                    "session_id": session_id,
                })

            elif msg_type == "reset":
                pipeline.reset()
                outbox.clear()
                await websocket.send_json({"type": "reset"})

            elif msg_type == "debug":
                await websocket.send_json({"type": "debug", **pipeline.export_debug_frames()})

            else:
                await websocket.send_json({
                    "type": "error",
                    "message": f"Unknown message type: {msg_type}"
                })

            while outbox:
                await websocket.send_json(outbox.pop(0))

    except WebSocketDisconnect:
        logger.info(f"Live session disconnected: mode={exercise_mode.value}, reps={pipeline.rep_count}")
        pipeline.stop()
        try:
            session_id = await _save_session(pipeline)
        except SQLAlchemyError:
            logger.exception(f"Could not save {exercise_mode.value} session on disconnect")
            return
        if session_id:
            logger.info(f"Saved session {session_id} on disconnect")
