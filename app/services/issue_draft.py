"""이슈 초안 상태 기계 — 이슈 편집 대화상자의 메모리 내 표현.

Issue draft state machine. A draft always carries both shapes in memory
(case1 and case2); only the selected one is validated and persisted, so
switching the shape never discards data.

States:
    closed → create | edit → validating → saved → closed
                                        ↘ (validation or save failure → back to create | edit)
    create | edit → cancelled → closed
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import TypeVar
from uuid import UUID

from pydantic import ValidationError as PydanticValidationError

from app.models.report import ISSUE_TYPE_SINGLE
from app.schemas.issue import (
    IssueItemInput,
    IssueResponse,
    IssueSaveRequest,
    MULTIPLE_ENTRY_COUNT,
    MultipleIssueData,
    MultipleIssueEntry,
    SINGLE_PHOTO_COUNT,
    SingleIssueData,
)
from app.services.image_service import PhotoFile
from app.services.upload_service import PhotoUploadPipeline
from app.utils.exceptions import BadRequestError, ValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T")

CASE1 = "case1"  # single — 항목 1 + 사진 3
CASE2 = "case2"  # multiple — (항목, 사진) 3쌍


class EditorState(str, Enum):
    CLOSED = "closed"
    CREATE = "create"
    EDIT = "edit"
    VALIDATING = "validating"
    SAVED = "saved"
    CANCELLED = "cancelled"


@dataclass
class Case1Data:
    sub_item_id: str = ""
    quantity: int = 1
    unit_price: float = 0
    photos: list[str] = field(default_factory=list)


@dataclass
class Case2Item:
    sub_item_id: str = ""
    quantity: int = 1
    unit_price: float = 0
    photo: str = ""

    def is_complete(self) -> bool:
        """세부 항목, 사진, 수량 > 0, 단가 > 0 모두 충족."""
        return bool(self.sub_item_id) and bool(self.photo) and self.quantity > 0 and self.unit_price > 0


def _empty_case2_items() -> list[Case2Item]:
    return [Case2Item() for _ in range(MULTIPLE_ENTRY_COUNT)]


@dataclass
class Case2Data:
    items: list[Case2Item] = field(default_factory=_empty_case2_items)


@dataclass
class IssueDraft:
    """편집 중인 이슈 초안."""

    case_type: str = CASE1
    main_item_id: str = ""
    notes: str = ""
    case1: Case1Data = field(default_factory=Case1Data)
    case2: Case2Data = field(default_factory=Case2Data)

    @classmethod
    def from_issue(cls, issue: IssueResponse) -> "IssueDraft":
        """저장된 이슈에서 초안을 만듭니다.

        ``single`` maps to case1 and anything else to case2. Items and
        photos are projected by position 0..2; missing positions default to
        quantity 1, price 0 and empty ids/photos.
        """
        draft = cls(
            case_type=CASE1 if issue.issue_type == ISSUE_TYPE_SINGLE else CASE2,
            main_item_id=issue.main_item_id,
            notes=issue.notes or "",
        )
        photos = [p.photo_url for p in issue.photos]
        if draft.case_type == CASE1:
            item = issue.items[0] if issue.items else None
            draft.case1 = Case1Data(
                sub_item_id=item.sub_item_id if item else "",
                quantity=(item.quantity if item else 0) or 1,
                unit_price=item.unit_price if item else 0,
                photos=[photos[i] if i < len(photos) else "" for i in range(SINGLE_PHOTO_COUNT)],
            )
        else:
            entries: list[Case2Item] = []
            for index in range(MULTIPLE_ENTRY_COUNT):
                item = issue.items[index] if index < len(issue.items) else None
                entries.append(Case2Item(
                    sub_item_id=item.sub_item_id if item else "",
                    quantity=(item.quantity if item else 0) or 1,
                    unit_price=item.unit_price if item else 0,
                    photo=photos[index] if index < len(photos) else "",
                ))
            draft.case2 = Case2Data(items=entries)
        return draft

    @property
    def issue_type(self) -> str:
        return "single" if self.case_type == CASE1 else "multiple"

    def validate(self) -> None:
        """활성 형태의 규칙을 검사합니다.

        Raises:
            ValidationError: 첫 번째로 위반한 규칙의 메시지 (Message of the first failed rule)
        """
        if not self.main_item_id:
            raise ValidationError("Select the main item for the issue")

        if self.case_type == CASE1:
            data = self.case1
            if not data.sub_item_id:
                raise ValidationError("Select the sub item for the issue")
            if len([p for p in data.photos if p]) != SINGLE_PHOTO_COUNT:
                raise ValidationError("Upload 3 photos for the issue")
            if data.quantity <= 0:
                raise ValidationError("Enter a valid quantity")
            if data.unit_price <= 0:
                raise ValidationError("Enter a valid price")
        else:
            complete = [item for item in self.case2.items if item.is_complete()]
            if len(complete) != MULTIPLE_ENTRY_COUNT:
                raise ValidationError(
                    "Complete all three items (sub item, quantity and a photo for each)"
                )

    def to_request(self) -> IssueSaveRequest:
        """검증된 초안을 태그드 유니온 저장 요청으로 변환합니다."""
        self.validate()
        try:
            if self.case_type == CASE1:
                data = SingleIssueData(
                    item=IssueItemInput(
                        sub_item_id=self.case1.sub_item_id,
                        quantity=self.case1.quantity,
                        unit_price=self.case1.unit_price,
                    ),
                    photos=[p for p in self.case1.photos if p],
                )
            else:
                data = MultipleIssueData(
                    entries=[
                        MultipleIssueEntry(
                            sub_item_id=item.sub_item_id,
                            quantity=item.quantity,
                            unit_price=item.unit_price,
                            photo_url=item.photo,
                        )
                        for item in self.case2.items
                        if item.is_complete()
                    ]
                )
            return IssueSaveRequest(main_item_id=self.main_item_id, notes=self.notes, data=data)
        except PydanticValidationError as exc:
            raise ValidationError(f"Invalid issue data: {exc.errors()[0]['msg']}")


class IssueEditor:
    """이슈 편집기 — 초안, 모드, 사진 업로드를 관리합니다.

    Args:
        sub_item_prices: 세부 항목 ID → 카탈로그 단가 (Catalog price per sub item id)
        pipeline: 사진 업로드 파이프라인 (Upload pipeline whose pending count gates saving)
        owner_id: 업로드 소유자 — 인증 사용자 (Authenticated upload owner)
    """

    def __init__(
        self,
        sub_item_prices: dict[str, float] | None = None,
        pipeline: PhotoUploadPipeline | None = None,
        owner_id: UUID | str | None = None,
    ) -> None:
        self.sub_item_prices: dict[str, float] = dict(sub_item_prices or {})
        self.pipeline: PhotoUploadPipeline = pipeline or PhotoUploadPipeline()
        self.owner_id = owner_id
        self.state: EditorState = EditorState.CLOSED
        self.last_outcome: EditorState | None = None
        self.draft: IssueDraft = IssueDraft()
        self.editing_issue_id: str | None = None
        self._mode: EditorState = EditorState.CREATE

    @property
    def is_open(self) -> bool:
        return self.state in (EditorState.CREATE, EditorState.EDIT)

    def _require_open(self) -> None:
        if not self.is_open:
            raise BadRequestError("Issue editor is not open")

    def sub_item_price(self, sub_item_id: str) -> float:
        return self.sub_item_prices.get(sub_item_id, 0) or 0

    def open_create(self) -> IssueDraft:
        self.draft = IssueDraft()
        self.editing_issue_id = None
        self._mode = self.state = EditorState.CREATE
        return self.draft

    def open_edit(self, issue: IssueResponse) -> IssueDraft:
        self.draft = IssueDraft.from_issue(issue)
        self.editing_issue_id = issue.id
        self._mode = self.state = EditorState.EDIT
        return self.draft

    def cancel(self) -> None:
        self.last_outcome = EditorState.CANCELLED
        self._close()

    def _close(self) -> None:
        self.state = EditorState.CLOSED
        self.draft = IssueDraft()
        self.editing_issue_id = None

    def set_case_type(self, case_type: str) -> None:
        """형태 전환 — 두 하위 구조 모두 유지됩니다."""
        if case_type not in (CASE1, CASE2):
            raise BadRequestError(f"Unknown issue case: {case_type}")
        self.draft.case_type = case_type

    def select_sub_item(self, sub_item_id: str, entry_index: int | None = None) -> None:
        """세부 항목을 선택하고 카탈로그 단가를 채웁니다.

        ``entry_index`` None selects for case1, otherwise the case2 entry.
        """
        price = self.sub_item_price(sub_item_id)
        if entry_index is None:
            self.draft.case1.sub_item_id = sub_item_id
            self.draft.case1.unit_price = price
        else:
            entry = self.draft.case2.items[entry_index]
            entry.sub_item_id = sub_item_id
            entry.unit_price = price

    def _read_case1_photo(self, index: int) -> str:
        photos = self.draft.case1.photos
        return photos[index] if index < len(photos) else ""

    def _write_case1_photo(self, index: int, value: str) -> None:
        photos = self.draft.case1.photos
        while len(photos) <= index:
            photos.append("")
        photos[index] = value

    def _read_case2_photo(self, index: int) -> str:
        items = self.draft.case2.items
        return items[index].photo if index < len(items) else ""

    def _write_case2_photo(self, index: int, value: str) -> None:
        items = self.draft.case2.items
        if index < len(items):
            items[index].photo = value

    def clear_case1_photo(self, index: int) -> None:
        self._write_case1_photo(index, "")

    async def upload_case1_photo(self, index: int, file: PhotoFile) -> str | None:
        """case1 사진 슬롯(0..2)에 업로드합니다."""
        self._require_open()
        if not 0 <= index < SINGLE_PHOTO_COUNT:
            raise BadRequestError("Photo slot out of range")
        return await self.pipeline.upload_to_slot(
            lambda: self._read_case1_photo(index),
            lambda value: self._write_case1_photo(index, value),
            file,
            self.owner_id,
        )

    async def upload_case2_photo(self, index: int, file: PhotoFile) -> str | None:
        """case2 항목 index의 사진을 업로드합니다."""
        self._require_open()
        if not 0 <= index < len(self.draft.case2.items):
            raise BadRequestError("Photo slot out of range")
        return await self.pipeline.upload_to_slot(
            lambda: self._read_case2_photo(index),
            lambda value: self._write_case2_photo(index, value),
            file,
            self.owner_id,
        )

    async def save(self, persist: Callable[[IssueSaveRequest, str | None], Awaitable[T]]) -> T:
        """초안을 검증하고 저장합니다.

        ``persist`` receives the tagged-union request and the issue id being
        edited (None for create). Save is blocked while uploads are pending.
        Validation and persistence failures return the editor to its mode
        with the draft intact and re-raise.

        Raises:
            ValidationError: 업로드 대기 중이거나 규칙 위반 (Pending uploads or shape rule failure)
        """
        self._require_open()
        if self.pipeline.has_pending:
            raise ValidationError("Wait for photo uploads to finish before saving")

        self.state = EditorState.VALIDATING
        try:
            request = self.draft.to_request()
            result = await persist(request, self.editing_issue_id)
        except Exception:
            self.state = self._mode
            raise

        self.state = EditorState.SAVED
        self.last_outcome = EditorState.SAVED
        self._close()
        return result
