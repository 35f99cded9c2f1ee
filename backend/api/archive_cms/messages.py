"""User-facing strings (zh-TW). Server logs stay in English."""

# Archive index API
ARCHIVE_FIELDS_REQUIRED = "所有欄位皆為必填"
ARCHIVE_NOT_FOUND = "典藏索引不存在"
ARCHIVE_DELETED = "典藏索引已成功刪除"
ARCHIVE_CREATE_FAILED = "典藏索引建立失敗"
ARCHIVE_LIST_FAILED = "典藏索引獲取失敗"
ARCHIVE_FETCH_FAILED = "典藏索引獲取失敗"
ARCHIVE_UPDATE_FAILED = "典藏索引更新失敗"
ARCHIVE_DELETE_FAILED = "典藏索引刪除失敗"

# Generic
INVALID_REQUEST = "請求格式錯誤"
NOT_FOUND = "找不到資源"
UNEXPECTED_ERROR = "伺服器發生錯誤"
DATABASE_UNAVAILABLE = "資料庫無法連線"

# Auth
LOGIN_REQUIRED = "請先登入"
INVALID_TOKEN = "登入憑證無效或已過期"
PERMISSION_DENIED = "權限不足"

# Dashboard
DASHBOARD_TITLE = "內容管理"
CONTENT_LOAD_FAILED = "載入內容時發生錯誤"
NO_CONTENT = "尚無內容"
NOT_PUBLISHED = "未發布"
UNKNOWN_ERROR = "未知錯誤"
DELETE_FAILED_PREFIX = "刪除失敗："

KIND_LABELS = {
    "article": "觀點文章",
    "photograph": "光影故事",
}

KIND_NOUNS = {
    "article": "文章",
    "photograph": "照片",
}


def delete_confirm(kind: str, title: str) -> str:
    return f"確定要刪除{KIND_NOUNS[kind]}「{title}」嗎？此操作無法復原。"


def delete_succeeded(kind: str) -> str:
    return f"{KIND_NOUNS[kind]}已成功刪除"


def delete_failed(reason: str | None) -> str:
    return DELETE_FAILED_PREFIX + (reason or UNKNOWN_ERROR)
