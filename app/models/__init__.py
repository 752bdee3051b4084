from app.models.match import Match

__all__ = [
    "Match",
]
