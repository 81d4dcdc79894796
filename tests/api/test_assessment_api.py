"""Quiz attempt endpoint tests."""

from __future__ import annotations

import pytest
from httpx import AsyncClient


async def _quiz_with_options(client: AsyncClient, seed, module: int) -> tuple[int, list[dict]]:
    """Quiz of two 5-mark questions, each completed to four options."""
    quiz = (await client.post("/api/v1/quizzes", json={"module_id": module, "title": "Basics"})).json()["id"]
    questions = []
    for text in ("What is TCP?", "What is UDP?"):
        question = (
            await client.post(f"/api/v1/quizzes/{quiz}/questions", json={"question": text, "marks": 5})
        ).json()["id"]
        correct = await seed.option(True)
        wrong = [await seed.option(False) for _ in range(3)]
        response = await client.post(f"/api/v1/questions/{question}/options", json={"option_ids": [correct, *wrong]})
        assert response.status_code == 200, response.text
        questions.append({"id": question, "correct": correct, "wrong": wrong[0]})
    return quiz, questions


@pytest.mark.asyncio
class TestAssessmentApi:
    async def test_attempt_and_result(self, client: AsyncClient, seed) -> None:
        user = await seed.user()
        domain = await seed.domain()
        module = await seed.module(domain)
        await seed.join(user, domain)
        await client.post("/api/v1/enrollments", json={"user_id": user, "module_id": module})
        quiz, (q1, q2) = await _quiz_with_options(client, seed, module)

        response = await client.post(
            f"/api/v1/quizzes/{quiz}/attempts",
            json={
                "user_id": user,
                "answers": [
                    {"question_id": q1["id"], "selected_option_id": q1["correct"]},
                    {"question_id": q2["id"], "selected_option_id": q2["wrong"]},
                ],
            },
        )
        assert response.status_code == 201
        data = response.json()
        assert data["score_percentage"] == "50.00"
        assert data["status"] == "inProgress"

        result = await client.get(f"/api/v1/quizzes/{quiz}/results/{user}")
        assert result.status_code == 200
        assert result.json()["score"] == 50.0
        assert result.json()["status"] == "inProgress"

    async def test_attempt_without_enrollment(self, client: AsyncClient, seed) -> None:
        user = await seed.user()
        domain = await seed.domain()
        module = await seed.module(domain)
        await seed.join(user, domain)
        quiz, (q1, _) = await _quiz_with_options(client, seed, module)

        response = await client.post(
            f"/api/v1/quizzes/{quiz}/attempts",
            json={"user_id": user, "answers": [{"question_id": q1["id"], "selected_option_id": q1["correct"]}]},
        )
        assert response.status_code == 409
        assert response.json()["kind"] == "not_enrolled"

    async def test_empty_answers_rejected(self, client: AsyncClient) -> None:
        response = await client.post("/api/v1/quizzes/1/attempts", json={"user_id": 1, "answers": []})
        assert response.status_code == 422
