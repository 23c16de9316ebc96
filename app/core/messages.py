"""
app/core/messages.py

User-facing messages shown by the form. The audience is Polish-speaking,
so every message a visitor can see lives here in one place.
"""

# ── Field validation ───────────────────────────────────────────────────────────

EMAIL_INVALID = "Wprowadź prawidłowy adres email"
FILE_MISSING = "Wybierz plik PDF do przesłania"
FILE_NOT_PDF = "Tylko pliki PDF są akceptowane"
FILE_TOO_LARGE = "Plik jest za duży. Maksymalny rozmiar to 15MB"

# ── Bot challenge ──────────────────────────────────────────────────────────────

BOT_CHECK_REQUIRED = "Potwierdź, że nie jesteś robotem"
BOT_CHECK_FAILED = "Weryfikacja reCAPTCHA nie powiodła się. Spróbuj ponownie."

# ── Submission ─────────────────────────────────────────────────────────────────

ALREADY_SUBMITTED = "Formularz został już wysłany z tego adresu IP"
SUBMISSION_IN_PROGRESS = "Przesyłanie w toku. Poczekaj na zakończenie."
UPLOAD_FAILED = "Nie udało się przesłać pliku"
UPLOAD_UNEXPECTED = "Wystąpił nieoczekiwany błąd podczas przesyłania pliku"
SAVE_FAILED = "Wystąpił błąd podczas zapisywania zgłoszenia"
SAVE_UNEXPECTED = "Wystąpił nieoczekiwany błąd"
SUCCESS = "Twój dokument został pomyślnie przesłany."
