from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from diplomastudy.models.files import FileItem
from diplomastudy.models.folders import BreadcrumbItem, CamelModel, FolderItem
from diplomastudy.models.quiz import MCQQuestion, TestResult


class HealthCheckResponse(BaseModel):
    """Response for health check endpoint"""

    status: str
    message: str


class MessageResponse(BaseModel):
    message: str


class SuccessResponse(BaseModel):
    success: bool


class FilesResponse(BaseModel):
    files: List[FileItem]


class UploadResponse(BaseModel):
    message: str
    file: FileItem


class BulkMoveResponse(BaseModel):
    message: str
    results: Dict[str, bool]


class CleanupResponse(CamelModel):
    message: str
    live_files: int


class FoldersResponse(BaseModel):
    folders: List[FolderItem]


class FolderResponse(BaseModel):
    folder: FolderItem


class BreadcrumbsResponse(BaseModel):
    breadcrumbs: List[BreadcrumbItem]


class StorageStatusResponse(CamelModel):
    """Which backend is active and whether it answers a listing"""

    status: str
    provider: str
    message: str
    prefix: str
    file_count: Optional[int] = None
    error: Optional[str] = None


class QuestionsResponse(BaseModel):
    questions: List[MCQQuestion]


class DocxUploadResponse(BaseModel):
    success: bool
    filename: str
    questions: List[MCQQuestion]
    message: str


class QuizResultResponse(TestResult):
    message: str


class QuestionSetSummary(CamelModel):
    id: str
    name: str
    filename: str
    question_count: int
    upload_date: str


class QuestionSetsResponse(CamelModel):
    question_sets: List[QuestionSetSummary]


class TestResultSavedResponse(BaseModel):
    __test__ = False

    success: bool
    message: str
    result: Dict[str, Any]
