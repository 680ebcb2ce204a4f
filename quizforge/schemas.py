from typing import Annotated, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

QuizType = Literal["mcq", "fill_blank", "identification", "matching", "mixed"]
QUIZ_TYPES = ("mcq", "fill_blank", "identification", "matching", "mixed")

SourceMode = Literal["files", "text"]


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


def _whole_number(value):
    # JSON 2.0 is an integer; bools, strings and 2.5 are left for strict int to reject
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


class MCQQuestion(_Frozen):
    id: str
    type: Literal["mcq"]
    prompt: str
    choices: List[str] = Field(min_length=2)
    answer_index: int = Field(ge=0, strict=True)
    explanation: str

    _answer_index_whole = field_validator("answer_index", mode="before")(_whole_number)

    @model_validator(mode="after")
    def _answer_in_choices(self):
        if self.answer_index >= len(self.choices):
            raise ValueError(
                f"answer_index {self.answer_index} out of range for {len(self.choices)} choices"
            )
        return self


class FillBlankQuestion(_Frozen):
    id: str
    type: Literal["fill_blank"]
    prompt: str
    answers: List[str] = Field(min_length=1)
    explanation: str


class IdentificationQuestion(_Frozen):
    id: str
    type: Literal["identification"]
    prompt: str
    answers: List[str] = Field(min_length=1)
    explanation: str


class MatchingPair(_Frozen):
    left: str
    right: str


class MatchingQuestion(_Frozen):
    id: str
    type: Literal["matching"]
    pairs: List[MatchingPair] = Field(min_length=2)
    explanation: str


TextQuestion = Union[FillBlankQuestion, IdentificationQuestion]

Question = Annotated[
    Union[MCQQuestion, FillBlankQuestion, IdentificationQuestion, MatchingQuestion],
    Field(discriminator="type"),
]

QUESTION_MODELS = (MCQQuestion, FillBlankQuestion, IdentificationQuestion, MatchingQuestion)


class Quiz(_Frozen):
    quiz_title: str
    quiz_type: QuizType
    question_count: int = Field(ge=0, strict=True)
    source_summary: str
    questions: List[Question]

    _count_whole = field_validator("question_count", mode="before")(_whole_number)

    @model_validator(mode="after")
    def _unique_ids(self):
        seen = set()
        for q in self.questions:
            if q.id in seen:
                raise ValueError(f"duplicate question id {q.id!r}")
            seen.add(q.id)
        return self


# Answer shapes: MCQ -> choice index, text types -> typed string,
# matching -> {pair index as string: selected right value}
AnswerValue = Union[int, str, Dict[str, str]]
AnswerState = Dict[str, AnswerValue]


class GenerateQuizSuccess(BaseModel):
    ok: Literal[True] = True
    quiz: Quiz
    raw: Optional[str] = None


class GenerateQuizFailure(BaseModel):
    ok: Literal[False] = False
    error: str
    raw: Optional[str] = None
