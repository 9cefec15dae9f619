import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from ... import crud, models, schemas
from ...auth import get_current_operator, token_for_operator
from ...database.connection import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

INVALID_CREDENTIALS = "Invalid registration or PIN"


@router.post("/login", response_model=schemas.Token)
def login(credentials: schemas.OperatorLogin, db: Session = Depends(get_db)):
    """工号 + PIN 登录"""
    operator = crud.get_operator_by_registration(db, credentials.registration)
    if not operator:
        raise HTTPException(status_code=401, detail=INVALID_CREDENTIALS)
    if not operator.active:
        raise HTTPException(status_code=403, detail="Operator is inactive")
    if not crud.authenticate_operator(db, credentials.registration, credentials.pin):
        raise HTTPException(status_code=401, detail=INVALID_CREDENTIALS)
    return schemas.Token(
        access_token=token_for_operator(operator),
        operator=schemas.OperatorRead.model_validate(operator),
    )


@router.get("/me", response_model=schemas.OperatorRead)
def me(operator: models.Operator = Depends(get_current_operator)):
    return operator


@router.post("/change-pin")
def change_pin(
    payload: schemas.ChangePin,
    operator: models.Operator = Depends(get_current_operator),
    db: Session = Depends(get_db),
):
    """操作员修改自己的PIN，需要提供当前PIN"""
    if not crud.authenticate_operator(db, operator.registration, payload.current_pin):
        raise HTTPException(status_code=401, detail="Current PIN is invalid")
    crud.update_operator_pin(db, operator.id, payload.new_pin)
    logger.info("Operator %s changed PIN", operator.registration)
    return {"message": "PIN changed"}
