# routers/user_router.py
from fastapi import APIRouter, Body, Depends, Request, status

from Controllers.user_controller import UserController

router = APIRouter(prefix="/api/v1/users", tags=["users"])


def get_user_controller(request: Request) -> UserController:
    return request.app.state.user_controller


# -----------------------------
# registration
# -----------------------------
@router.post("", status_code=status.HTTP_201_CREATED)
def create_user(payload: dict = Body(...), controller: UserController = Depends(get_user_controller)):
    return controller.create_user(payload)


# -----------------------------
# login
# -----------------------------
@router.post("/login")
def login(payload: dict = Body(...), controller: UserController = Depends(get_user_controller)):
    return controller.login(payload)
