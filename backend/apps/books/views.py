from __future__ import annotations

import io

from django.http import FileResponse, HttpResponse
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from .models import Madzhab, OutputLanguage, TargetAudience
from .serializers import GenerationParametersSerializer, ManuscriptSnapshotSerializer
from .services.pipeline import BookWorkflowService, ManuscriptSession


class ManuscriptViewSet(viewsets.ViewSet):
    """Session-scoped manuscript: generate, preview, reset and export one book at a time."""

    workflow_class = BookWorkflowService

    def get_workflow(self) -> BookWorkflowService:
        return self.workflow_class()

    def get_manuscript(self, request) -> ManuscriptSession:
        return ManuscriptSession(request.session)

    def list(self, request):
        return self._snapshot_response(self.get_manuscript(request).snapshot())

    @action(detail=False, methods=["get"], url_path="options")
    def choices(self, request):
        defaults = GenerationParametersSerializer.parameter_defaults()
        return Response(
            {
                "madzhab": [{"value": v, "label": l} for v, l in Madzhab.choices],
                "target_audience": [{"value": v, "label": l} for v, l in TargetAudience.choices],
                "language": [{"value": v, "label": l} for v, l in OutputLanguage.choices],
                "defaults": defaults,
            }
        )

    @action(detail=False, methods=["post"], url_path="generate")
    def generate(self, request):
        serializer = GenerationParametersSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        snapshot = self.get_workflow().generate(self.get_manuscript(request), serializer.to_parameters())
        return self._snapshot_response(snapshot)

    @action(detail=False, methods=["post"], url_path="retry")
    def retry(self, request):
        return self._snapshot_response(self.get_workflow().retry(self.get_manuscript(request)))

    @action(detail=False, methods=["post"], url_path="reset")
    def reset(self, request):
        return self._snapshot_response(self.get_workflow().reset(self.get_manuscript(request)))

    @action(detail=False, methods=["get"], url_path="export")
    def export(self, request):
        result = self.get_workflow().export(self.get_manuscript(request))
        return FileResponse(
            io.BytesIO(result.content),
            as_attachment=True,
            filename=result.filename,
            content_type=result.content_type,
        )

    @action(detail=False, methods=["get"], url_path="text")
    def text(self, request):
        content = self.get_workflow().plain_text(self.get_manuscript(request))
        return HttpResponse(content, content_type="text/plain; charset=utf-8")

    def _snapshot_response(self, snapshot, status_code: int = status.HTTP_200_OK) -> Response:
        return Response(ManuscriptSnapshotSerializer(snapshot).data, status=status_code)
