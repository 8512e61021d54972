"""
models/question_model.py

시험/문제/응시 관련 데이터 모델.
Pydantic v2 적용. 백엔드 JSON 응답을 그대로 검증/변환한다.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# 구조화된 options 목록이 없을 때 사용하는 보기 필드 (option_a ~ option_f)
OPTION_LETTERS = ("A", "B", "C", "D", "E", "F")


class QuestionType(str, Enum):
    SINGLE = "single"
    MULTIPLE = "multiple"

    @classmethod
    def from_tag(cls, tag: Any) -> "QuestionType":
        """문제 유형 태그 정규화. "single" 이 아니면 (태그가 없어도) 복수 선택으로 본다."""
        if isinstance(tag, str) and tag.strip().lower() == "single":
            return cls.SINGLE
        return cls.MULTIPLE


class Option(BaseModel):
    """보기 하나. text는 화면 표시 및 답안 값, value는 A~F 라벨."""

    text: str = Field(..., description="보기 내용 (답안으로 저장되는 값)")
    value: str = Field("", description="보기 라벨 (A~F 등)")


class Question(BaseModel):
    """
    연습 시험 문제 모델.

    ordinal은 시험 내 1-based 위치이며 세션 동안 변하지 않는다.
    """

    id: Optional[str] = Field(None, description="백엔드 문제 ID (없으면 None)")
    ordinal: int = Field(..., ge=1, description="문제 번호 (1-based)")
    question_text: str = Field("", description="발문/문제 내용")
    question_type: QuestionType = Field(QuestionType.SINGLE, description="single / multiple")
    options: List[Option] = Field(default_factory=list, description="보기 리스트")
    points: int = Field(1, description="배점")

    model_config = ConfigDict(frozen=True)

    @property
    def is_multiple(self) -> bool:
        return self.question_type is QuestionType.MULTIPLE

    @classmethod
    def from_api(cls, raw: Dict[str, Any], ordinal: int) -> "Question":
        """
        백엔드 문제 dict → Question.

        - ID는 id, _id, question_id 순서로 찾는다.
        - options 리스트가 없으면 option_a ~ option_f 필드로 보기를 합성한다.
        - options 항목은 dict({"text", "value"}) 또는 문자열 모두 허용.
        """
        raw_id = raw.get("id") or raw.get("_id") or raw.get("question_id")

        options: List[Option] = []
        raw_options = raw.get("options")
        if isinstance(raw_options, list) and raw_options:
            for idx, item in enumerate(raw_options):
                label = OPTION_LETTERS[idx] if idx < len(OPTION_LETTERS) else str(idx + 1)
                if isinstance(item, dict):
                    text = item.get("text") or item.get("option_text") or ""
                    options.append(Option(text=str(text), value=str(item.get("value") or label)))
                else:
                    options.append(Option(text=str(item), value=label))
        else:
            for letter in OPTION_LETTERS:
                text = raw.get(f"option_{letter.lower()}")
                if text:
                    options.append(Option(text=str(text), value=letter))

        return cls(
            id=str(raw_id) if raw_id else None,
            ordinal=ordinal,
            question_text=str(raw.get("question_text") or raw.get("text") or ""),
            question_type=QuestionType.from_tag(raw.get("question_type")),
            options=options,
            points=int(raw.get("points") or 1),
        )


class PracticeTest(BaseModel):
    """시험(ExamDefinition)에 속한 개별 연습 시험."""

    id: Optional[str] = Field(None, description="DB 식별자")
    slug: Optional[str] = Field(None, description="SEO slug")
    name: str = Field("", description="연습 시험 이름")
    duration: Any = Field(None, description="시험 시간 (숫자 분 또는 '90 minutes' 등 문자열)")
    difficulty: Optional[str] = Field(None, description="난이도")
    questions: int = Field(0, description="문제 수")
    is_placeholder: bool = Field(False, description="목록에서 찾지 못해 합성된 시험 여부")

    model_config = ConfigDict(extra="ignore")

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, v: Any) -> Optional[str]:
        return str(v) if v not in (None, "") else None

    @field_validator("questions", mode="before")
    @classmethod
    def coerce_question_count(cls, v: Any) -> int:
        # 목록 API는 문제 수 대신 문제 배열을 내려주기도 한다
        if isinstance(v, list):
            return len(v)
        try:
            return int(v or 0)
        except (TypeError, ValueError):
            return 0

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> "PracticeTest":
        data = dict(raw)
        if not data.get("id") and data.get("_id"):
            data["id"] = data["_id"]
        return cls.model_validate(data)


class ExamDefinition(BaseModel):
    """시험 정의. 세션 시작 시 한 번 조회되며 이후 변경되지 않는다."""

    id: str = Field(..., description="시험(코스) ID")
    title: Optional[str] = Field(None, description="시험 제목")
    provider: str = Field("", description="제공 기관 (예: aws)")
    code: str = Field("", description="시험 코드 (예: saa-c03)")
    practice_tests: List[PracticeTest] = Field(
        default_factory=list,
        alias="practice_tests_list",
        description="연습 시험 요약 목록",
    )
    duration: Any = Field(None, description="기본 시험 시간")
    difficulty: Optional[str] = Field(None, description="난이도")

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, v: Any) -> str:
        if v in (None, ""):
            raise ValueError("시험 ID가 없습니다.")
        return str(v)

    @field_validator("practice_tests", mode="before")
    @classmethod
    def parse_practice_tests(cls, v: Any) -> List[Any]:
        if not isinstance(v, list):
            return []
        return [PracticeTest.from_api(t) if isinstance(t, dict) else t for t in v]

    @property
    def display_title(self) -> str:
        return self.title or f"{self.provider} {self.code}".strip().upper()


class QuestionBundle(BaseModel):
    """fetch-questions 응답: 문제 목록 + 시험 시간."""

    questions: List[Question] = Field(default_factory=list)
    duration: Any = Field(None, description="연습 시험 시간 (없으면 None)")


class Attempt(BaseModel):
    """서버가 발급한 응시 기록. (학습자, 시험, 연습 시험) 당 하나."""

    attempt_id: str = Field(..., min_length=1, description="응시 ID")
    restored_answers: Dict[int, List[str]] = Field(
        default_factory=dict,
        description="이전 응시에서 복원할 답안. {ordinal: [선택 보기]}",
    )


class SubmissionAnswer(BaseModel):
    """submit-attempt 요청의 문제별 답안. 단일 선택도 항상 리스트."""

    question_id: str
    selected_answers: List[str] = Field(default_factory=list)


class SubmissionResult(BaseModel):
    """submit-attempt 응답. 채점은 서버가 하며 값은 그대로 사용한다."""

    success: bool = False
    score: float = 0
    percentage: float = 0.0
    passed: bool = False
    message: Optional[str] = None

    model_config = ConfigDict(extra="ignore")

    @field_validator("score", "percentage", mode="before")
    @classmethod
    def null_score_is_zero(cls, v: Any) -> Any:
        return 0 if v is None else v

    @field_validator("passed", mode="before")
    @classmethod
    def null_passed_is_false(cls, v: Any) -> Any:
        return False if v is None else v


class ResultsSummary(BaseModel):
    """결과 화면으로 넘기는 요약."""

    attempt_id: str
    questions_completed: int = Field(..., description="접근 가능한 문제 수")
    total_questions: int
    correct_answers: float
    incorrect_answers: float
    unanswered: int
    time_taken: str = Field(..., description="소요 시간 (mm:ss)")
    time_spent_seconds: int
    has_full_access: bool
    percentage: float
    passed: bool
