from pydantic import BaseModel, ConfigDict, Field


class ErrorResponse(BaseModel):
    """Error body shared by every endpoint"""
    error: str = Field(..., description="Short human-readable error message")

    model_config = ConfigDict(
        json_schema_extra={"example": {"error": "Chat session not found or access denied"}}
    )


ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}
