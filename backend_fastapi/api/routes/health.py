from fastapi import APIRouter

router = APIRouter(tags=["health"])


@router.get("/health", summary="Estado del servidor")
def health() -> dict[str, str]:
    return {"status": "healthy"}
