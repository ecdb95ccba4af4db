import pytest

from relevance_engine import Document


@pytest.fixture
def fruit_documents() -> list[Document]:
    return [
        Document("a", tags=["x"], fields={"text": "apple banana"}),
        Document("b", tags=["x", "y"], fields={"text": "banana cherry"}),
    ]


@pytest.fixture
def tag_labels() -> dict[str, str]:
    return {"x": "Fruit", "y": "Yellow"}
