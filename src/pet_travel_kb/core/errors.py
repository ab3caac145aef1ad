"""Custom exception classes for the pet travel knowledge base."""

from typing import Optional


class PetTravelKBError(Exception):
    """Base exception for all pet travel knowledge base errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def __str__(self) -> str:
        if self.error_code:
            return f"[{self.error_code}] {self.message}"
        return self.message


class FetchError(PetTravelKBError):
    """Error while fetching a table from the remote spreadsheet service."""

    def __init__(
        self,
        message: str,
        table_name: Optional[str] = None,
        source_url: Optional[str] = None,
        status: Optional[int] = None,
        **kwargs,
    ):
        super().__init__(message, error_code="FETCH", **kwargs)
        self.table_name = table_name
        self.source_url = source_url
        self.status = status
        self.details.update({
            "table_name": table_name,
            "source_url": source_url,
            "status": status,
        })


class ParseError(PetTravelKBError):
    """Response payload could not be parsed into the tabular envelope."""

    def __init__(
        self,
        message: str,
        table_name: Optional[str] = None,
        **kwargs,
    ):
        super().__init__(message, error_code="PARSE", **kwargs)
        self.table_name = table_name
        self.details.update({"table_name": table_name})


class ReferentialIntegrityError(PetTravelKBError):
    """A row references a key that does not exist in its parent table."""

    def __init__(
        self,
        message: str,
        table_name: Optional[str] = None,
        rule_id: Optional[str] = None,
        dest_code: Optional[str] = None,
        **kwargs,
    ):
        super().__init__(message, error_code="REFERENTIAL_INTEGRITY", **kwargs)
        self.table_name = table_name
        self.rule_id = rule_id
        self.dest_code = dest_code
        self.details.update({
            "table_name": table_name,
            "rule_id": rule_id,
            "dest_code": dest_code,
        })


class DestinationConflictError(PetTravelKBError):
    """Two RULES rows disagree on a destination-wide attribute."""

    def __init__(
        self,
        message: str,
        dest_code: Optional[str] = None,
        field: Optional[str] = None,
        values: Optional[list] = None,
        **kwargs,
    ):
        super().__init__(message, error_code="DESTINATION_CONFLICT", **kwargs)
        self.dest_code = dest_code
        self.field = field
        self.values = values or []
        self.details.update({
            "dest_code": dest_code,
            "field": field,
            "values": self.values,
        })


class DataNotLoadedError(PetTravelKBError):
    """Regulation data has not been loaded yet."""

    def __init__(self, message: str = "Regulation data has not been loaded", **kwargs):
        super().__init__(message, error_code="DATA_NOT_LOADED", **kwargs)


class ResolutionError(PetTravelKBError):
    """Base class for user-correctable query errors."""


class MissingSelectionError(ResolutionError):
    """Origin or destination country was not selected."""

    def __init__(
        self,
        message: str = "請先在輸入框中選擇有效的出發國家和目的地國家。",
        **kwargs,
    ):
        super().__init__(message, error_code="MISSING_SELECTION", **kwargs)


class SameCountryError(ResolutionError):
    """Origin and destination are the same country."""

    def __init__(
        self,
        country_code: str,
        message: str = "出發國家和抵達國家不能相同，請重新選擇！",
        **kwargs,
    ):
        super().__init__(message, error_code="SAME_COUNTRY", **kwargs)
        self.country_code = country_code
        self.details.update({"country_code": country_code})


class NoDataForDestinationError(ResolutionError):
    """No regulation rules exist for the destination."""

    def __init__(
        self,
        dest_code: str,
        dest_display_name: Optional[str] = None,
        **kwargs,
    ):
        name = dest_display_name or dest_code
        super().__init__(
            f"抱歉，{name} 的詳細規定資料尚未建立。",
            error_code="NO_DATA_FOR_DESTINATION",
            **kwargs,
        )
        self.dest_code = dest_code
        self.dest_display_name = dest_display_name
        self.details.update({"dest_code": dest_code})


class NoRegulationFoundError(ResolutionError):
    """No regulation entry matches the resolved risk level and pet type."""

    def __init__(
        self,
        origin_code: str,
        dest_code: str,
        risk_level: str,
        origin_display_name: Optional[str] = None,
        dest_display_name: Optional[str] = None,
        **kwargs,
    ):
        origin = origin_display_name or origin_code
        dest = dest_display_name or dest_code
        super().__init__(
            f"抱歉，尚未找到 {origin} (分級: {risk_level}) 到 {dest} 的具體規定資料，"
            "請檢查試算表中該分級的規則是否已建立。",
            error_code="NO_REGULATION_FOUND",
            **kwargs,
        )
        self.origin_code = origin_code
        self.dest_code = dest_code
        self.risk_level = risk_level
        self.details.update({
            "origin_code": origin_code,
            "dest_code": dest_code,
            "risk_level": risk_level,
        })


class UnknownPetTypeError(ResolutionError):
    """Pet type is not one of the supported types."""

    def __init__(self, pet_type: str, **kwargs):
        super().__init__(
            f"不支援的寵物類型：{pet_type}",
            error_code="UNKNOWN_PET_TYPE",
            **kwargs,
        )
        self.pet_type = pet_type
        self.details.update({"pet_type": pet_type})
