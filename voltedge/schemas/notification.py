from pydantic import BaseModel
from typing import Literal, Optional


class ToastAction(BaseModel):
    label: str
    href: str


class Toast(BaseModel):
    level: Literal["success", "info", "error"]
    message: str
    description: Optional[str] = None
    action: Optional[ToastAction] = None
