from fastapi import APIRouter, Depends, status
from typing import List, Optional

from escalator.api.deps import get_dataset_provider, get_filter_store, get_translator
from escalator.schema.filters import (
    ColumnResponse,
    FilterConfigRequest,
    FilterConfiguration,
    FilterPreview,
    FilterPromptRequest,
    GeneratedFilters,
    OperatorOption,
)
from escalator.services.filters import (
    DataUnavailable,
    FilterConfigStore,
    FilteredDatasetProvider,
    FilterValidationError,
    list_columns,
    operators_for,
    validate_groups,
)
from escalator.services.filters.columns import OPERATOR_LABELS, default_value_for
from escalator.services.filter_translator import FilterTranslator, TranslationError, TranslatorNotConfigured
from escalator.exceptions.filter_exceptions import (
    FilterValidationException,
    InvalidPromptException,
    TranslationException,
    TranslatorNotConfiguredException,
)
from escalator.exceptions.record_exceptions import StorageUnavailableException

router = APIRouter(prefix="/filters", tags=["filters"])


@router.get("/columns", response_model=List[ColumnResponse])
def get_columns():

    return [
        ColumnResponse(
            key=column.key,
            label=column.label,
            type=column.type,
            operators=[OperatorOption(value=op, label=OPERATOR_LABELS[op]) for op in operators_for(column.type)],
            default_value=default_value_for(column.type)
        )
        for column in list_columns()
    ]


@router.get("", response_model=Optional[FilterConfiguration])
def get_filters(store: FilterConfigStore = Depends(get_filter_store)):

    try:
        return store.load()
    except DataUnavailable:
        raise StorageUnavailableException()


@router.put("", response_model=FilterConfiguration)
def apply_filters(
    config: FilterConfigRequest,
    store: FilterConfigStore = Depends(get_filter_store)
):

    try:
        return store.save(config.filters)
    except FilterValidationError as e:
        raise FilterValidationException(e.message, reason=e.reason.value)
    except DataUnavailable:
        raise StorageUnavailableException()


@router.post("/reset", response_model=FilterConfiguration)
def reset_filters(store: FilterConfigStore = Depends(get_filter_store)):

    try:
        return store.reset()
    except DataUnavailable:
        raise StorageUnavailableException()


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
def clear_filters(store: FilterConfigStore = Depends(get_filter_store)):

    try:
        store.clear()
    except DataUnavailable:
        raise StorageUnavailableException()


@router.post("/preview", response_model=FilterPreview)
def preview_filters(
    config: FilterConfigRequest,
    provider: FilteredDatasetProvider = Depends(get_dataset_provider)
):

    try:
        validate_groups(config.filters)
        view = provider.preview(config.filters)
    except FilterValidationError as e:
        raise FilterValidationException(e.message, reason=e.reason.value)
    except DataUnavailable:
        raise StorageUnavailableException()

    return FilterPreview(total_count=view.total_count, filtered_count=view.filtered_count)


@router.post("/generate", response_model=GeneratedFilters)
def generate_filters(
    request: FilterPromptRequest,
    translator: FilterTranslator = Depends(get_translator)
):

    if not request.prompt or not request.prompt.strip():
        raise InvalidPromptException()

    try:
        groups = translator.translate(request.prompt)
    except TranslatorNotConfigured:
        raise TranslatorNotConfiguredException()
    except TranslationError as e:
        raise TranslationException(e.message, reason=e.reason.value)

    return GeneratedFilters(filters=groups)
