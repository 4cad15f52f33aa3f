from __future__ import annotations

from django.db import models


class ManuscriptState(models.TextChoices):
    IDLE = "idle", "Idle"
    GENERATING = "generating", "Generating"
    VIEWING = "viewing", "Viewing"
    ERROR = "error", "Error"


class Madzhab(models.TextChoices):
    SHAFII = "Shafi'i", "Shafi'i"
    HANAFI = "Hanafi", "Hanafi"
    MALIKI = "Maliki", "Maliki"
    HANBALI = "Hanbali", "Hanbali"
    COMPARATIVE = "Comparative (Muqaran)", "Comparative (Muqaran)"


class TargetAudience(models.TextChoices):
    GENERAL = "General Public", "General Public"
    ACADEMIC = "Academic/Scholarly", "Academic/Scholarly"
    STUDENTS = "University Students", "University Students"
    CHILDREN = "Children", "Children"


class OutputLanguage(models.TextChoices):
    INDONESIA = "Indonesia", "Bahasa Indonesia"
    ARABIC = "Arabic", "Arabic (العربية)"
    ENGLISH = "English", "English"
    GERMAN = "German", "German (Deutsch)"
    FRENCH = "French", "French (Français)"
    MALAY = "Malay", "Bahasa Malaysia (Melayu)"
