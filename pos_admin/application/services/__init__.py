from .temporal_resolver import TemporalResolver, parse_effective_date
from .field_validator import FieldValidator, coerce_input
from .record_browser import filter_records, sort_records
from .schema_loader import EntitySchemaLoader, SchemaRegistry
from .reference_data_service import ReferenceDataService, is_active_record
from .form_controller import FormController
from .record_table_service import RecordTableService

__all__ = [
    "TemporalResolver",
    "parse_effective_date",
    "FieldValidator",
    "coerce_input",
    "filter_records",
    "sort_records",
    "EntitySchemaLoader",
    "SchemaRegistry",
    "ReferenceDataService",
    "is_active_record",
    "FormController",
    "RecordTableService",
]
