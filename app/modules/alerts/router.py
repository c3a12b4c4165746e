"""HTTP endpoints for rule evaluation, alert ordering and status transitions."""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from app.modules.alerts.lifecycle import severity_counts
from app.modules.alerts.models import Alert, PatientHistory
from app.modules.alerts.schemas import (
    AlertEvaluationRequest,
    AlertEvaluationResponse,
    AlertGroupsResponse,
    AlertListRequest,
    AlertTransitionRequest,
)
from app.modules.alerts.service import AlertService, get_alert_service

router = APIRouter()


@router.post(
    "/evaluate",
    response_model=AlertEvaluationResponse,
    summary="Evaluate a patient's history against the alert rules",
)
def evaluate_alerts(
    payload: AlertEvaluationRequest,
    service: AlertService = Depends(get_alert_service),
) -> AlertEvaluationResponse:
    """Return rule matches and the alerts to persist. Rules with an open alert are skipped."""
    history = PatientHistory(
        patient_id=payload.patient_id,
        readings=list(payload.readings),
        missed_doses=list(payload.missed_doses),
    )
    pending, created = service.process(history, payload.open_alerts, payload.now)
    return AlertEvaluationResponse(pending=pending, created=created)


@router.post("/order", response_model=List[Alert], summary="Order alerts for display")
def order_alerts(
    payload: AlertListRequest,
    service: AlertService = Depends(get_alert_service),
) -> List[Alert]:
    return service.order(payload.alerts)


@router.post("/groups", response_model=AlertGroupsResponse, summary="Group active alerts by severity")
def group_alerts(
    payload: AlertListRequest,
    service: AlertService = Depends(get_alert_service),
) -> AlertGroupsResponse:
    return AlertGroupsResponse(
        groups=service.groups(payload.alerts),
        counts=severity_counts(payload.alerts),
    )


@router.post(
    "/{alert_id}/transition",
    response_model=Alert,
    summary="Acknowledge, resolve or dismiss an active alert",
)
def transition_alert(
    alert_id: str,
    payload: AlertTransitionRequest,
    service: AlertService = Depends(get_alert_service),
) -> Alert:
    """Return the updated alert for the caller to persist; non-active alerts are rejected with 409."""
    if payload.alert.id != alert_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="alert id in path does not match body",
        )
    return service.transition(
        payload.alert,
        payload.status,
        note=payload.resolution_note,
        actor=payload.resolved_by,
    )
