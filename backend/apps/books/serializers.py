from __future__ import annotations

from typing import Any, Dict

from rest_framework import serializers
from rest_framework.fields import empty

from .models import Madzhab, OutputLanguage, TargetAudience
from .services.schemas import (
    MAX_PAGE_COUNT,
    MAX_REFERENCE_COUNT,
    MIN_PAGE_COUNT,
    MIN_REFERENCE_COUNT,
    GenerationParameters,
)


class GenerationParametersSerializer(serializers.Serializer):
    topic = serializers.CharField(max_length=300, trim_whitespace=True)
    author_name = serializers.CharField(max_length=160, trim_whitespace=True)
    madzhab = serializers.ChoiceField(choices=Madzhab.choices, default=Madzhab.SHAFII.value)
    target_audience = serializers.ChoiceField(choices=TargetAudience.choices, default=TargetAudience.GENERAL.value)
    include_multimedia = serializers.BooleanField(default=True)
    page_count = serializers.IntegerField(min_value=MIN_PAGE_COUNT, max_value=MAX_PAGE_COUNT, default=20)
    reference_count = serializers.IntegerField(
        min_value=MIN_REFERENCE_COUNT,
        max_value=MAX_REFERENCE_COUNT,
        default=15,
    )
    language = serializers.ChoiceField(choices=OutputLanguage.choices, default=OutputLanguage.INDONESIA.value)

    @classmethod
    def parameter_defaults(cls) -> Dict[str, Any]:
        fields = cls().fields
        return {name: field.default for name, field in fields.items() if field.default is not empty}

    def to_parameters(self) -> GenerationParameters:
        data = self.validated_data
        return GenerationParameters(
            topic=data["topic"],
            author_name=data["author_name"],
            madzhab=str(data["madzhab"]),
            target_audience=str(data["target_audience"]),
            include_multimedia=bool(data["include_multimedia"]),
            page_count=int(data["page_count"]),
            reference_count=int(data["reference_count"]),
            language=str(data["language"]),
        )


class SectionSerializer(serializers.Serializer):
    title = serializers.CharField()
    content = serializers.CharField(allow_blank=True, trim_whitespace=False)


class ChapterSerializer(serializers.Serializer):
    title = serializers.CharField()
    sections = SectionSerializer(many=True)


class BookStructureSerializer(serializers.Serializer):
    title = serializers.CharField()
    subtitle = serializers.CharField()
    author = serializers.CharField()
    abstract = serializers.CharField(allow_blank=True)
    language = serializers.CharField()
    chapters = ChapterSerializer(many=True)
    references = serializers.ListField(child=serializers.CharField(allow_blank=True))


class ManuscriptSnapshotSerializer(serializers.Serializer):
    state = serializers.CharField()
    error = serializers.CharField(allow_null=True)
    parameters = serializers.DictField(allow_null=True)
    book = BookStructureSerializer(allow_null=True)
