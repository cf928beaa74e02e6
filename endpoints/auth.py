from fastapi import APIRouter
from pydantic import BaseModel, EmailStr
import logging

from utils.security import login_demo_user
from utils.response import create_response

logger = logging.getLogger(__name__)

router = APIRouter()


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


@router.post("/login")
def login(request: LoginRequest):
    """
Login

Authenticates the demo user with email and password and returns a JWT to be
sent as `Authorization: Bearer <token>` to every protected endpoint.

- **URL**: `/api/auth/login`
- **Method**: `POST`
- **Request body**:
  - `email` (string): User email.
  - `password` (string): User password.

- **Responses**:
  - **200 OK**: Login succeeded.
    ```json
    {
        "status": "success",
        "message": "Login successful",
        "data": {
            "accessToken": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9..."
        }
    }
    ```
  - **401 Unauthorized**: Wrong email or password.
    ```json
    {
        "status": "error",
        "message": "Invalid credentials"
    }
    ```

- **Example request**:
    ```bash
    curl -X POST "http://localhost:8000/api/auth/login" \
    -H "Content-Type: application/json" \
    -d '{"email": "admin@example.com", "password": "admin123"}'
    ```
"""
    access_token = login_demo_user(request.email, request.password)
    if not access_token:
        logger.warning("Failed login attempt for %s", request.email)
        return create_response("error", "Invalid credentials", status_code=401)

    logger.info("User %s logged in", request.email)
    return create_response("success", "Login successful", {"accessToken": access_token})
