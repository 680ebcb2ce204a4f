import os
import tempfile
import copy

# settings are read at import time, so the environment goes first
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["RATE_LIMIT"] = "5/minute"
os.environ["MOCK_MODE"] = "false"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="quizforge-uploads-")

import pytest

from quizforge.schemas import Quiz


SAMPLE_QUIZ = {
    "quiz_title": "Networking Basics",
    "quiz_type": "mixed",
    "question_count": 4,
    "source_summary": "Built from lecture notes.",
    "questions": [
        {"id": "q1", "type": "mcq", "prompt": "Which layer handles routing?",
         "choices": ["Physical", "Data Link", "Network", "Transport"], "answer_index": 2,
         "explanation": "IP routing is Layer 3."},
        {"id": "q2", "type": "fill_blank", "prompt": "The handshake ends with ____.",
         "answers": ["ACK"], "explanation": "SYN, SYN-ACK, ACK."},
        {"id": "q3", "type": "identification", "prompt": "Maps names to IP addresses.",
         "answers": ["DNS", "Domain Name System"], "explanation": "DNS resolves hostnames."},
        {"id": "q4", "type": "matching", "pairs": [
            {"left": "HTTP", "right": "80"}, {"left": "HTTPS", "right": "443"}, {"left": "SSH", "right": "22"}],
         "explanation": "Well-known ports."},
    ],
}


@pytest.fixture
def quiz_dict():
    return copy.deepcopy(SAMPLE_QUIZ)


@pytest.fixture
def quiz(quiz_dict):
    return Quiz.model_validate(quiz_dict)
