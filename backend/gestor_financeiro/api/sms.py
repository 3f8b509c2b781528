"""
Inbound SMS endpoints.
"""

import asyncio
from typing import Callable

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from sqlalchemy.orm import Session

from gestor_financeiro.ai.extractor import BaseExpenseExtractor
from gestor_financeiro.api.errors import to_http_exception
from gestor_financeiro.config import settings
from gestor_financeiro.dependencies import get_extractor, get_session_factory
from gestor_financeiro.exceptions import GestorError
from gestor_financeiro.schemas.sms import SmsBatch, SmsBatchAccepted, SmsBatchResult, SmsStatus
from gestor_financeiro.services.sms_service import SmsPipeline, load_filter_config, run_sms_batch

router = APIRouter(prefix="/sms", tags=["sms"])


@router.post("", response_model=SmsBatchAccepted, status_code=202)
def receive_sms(
    batch: SmsBatch,
    background_tasks: BackgroundTasks,
    session_factory: Callable[[], Session] = Depends(get_session_factory),
    extractor: BaseExpenseExtractor = Depends(get_extractor)
):
    """Acknowledge an SMS-received notification and process it in the background."""
    background_tasks.add_task(run_sms_batch, batch.messages, session_factory, extractor)
    return SmsBatchAccepted(accepted=len(batch.messages))


@router.post("/process", response_model=SmsBatchResult)
async def process_sms(
    batch: SmsBatch,
    session_factory: Callable[[], Session] = Depends(get_session_factory),
    extractor: BaseExpenseExtractor = Depends(get_extractor)
):
    """Process a batch synchronously and report what happened to each message."""
    try:
        filter_config = await asyncio.wait_for(
            asyncio.to_thread(load_filter_config, session_factory),
            timeout=settings.store_timeout_seconds
        )
    except asyncio.TimeoutError:
        raise HTTPException(status_code=503, detail="Reading SMS settings timed out")
    except GestorError as e:
        raise to_http_exception(e) from e

    pipeline = SmsPipeline(session_factory, extractor, filter_config)
    outcomes = await pipeline.process_batch(batch.messages)
    return SmsBatchResult(
        outcomes=outcomes,
        persisted=sum(1 for o in outcomes if o.status == SmsStatus.persisted)
    )
