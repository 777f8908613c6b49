"""
Customer- and translator-facing texts (Swedish, as shown in the apps and mails).

Mail bodies are rendered by the delivery service from the template ids below;
this module only owns subjects, push bodies, SMS bodies and the short
messages returned by the accept/cancel endpoints.
"""

from datetime import datetime

# ── Mail templates ──────────────────────────────────────────────
TEMPLATE_JOB_ACCEPTED = "emails.job-accepted"
TEMPLATE_STATUS_TO_CUSTOMER = "emails.job-change-status-to-customer"
TEMPLATE_SESSION_ENDED = "emails.session-ended"
TEMPLATE_ADMIN_CANCELLED = "emails.status-changed-from-pending-or-assigned-customer"
TEMPLATE_CANCELLED_CUSTOMER = "emails.job-cancelled-customer"
TEMPLATE_CANCELLED_TRANSLATOR = "emails.job-cancelled-translator"
TEMPLATE_TRANSLATOR_CUSTOMER = "emails.job-changed-translator-customer"
TEMPLATE_TRANSLATOR_OLD = "emails.job-changed-translator-old-translator"
TEMPLATE_TRANSLATOR_NEW = "emails.job-changed-translator-new-translator"
TEMPLATE_DATE_CHANGED = "emails.job-changed-date"
TEMPLATE_LANG_CHANGED = "emails.job-changed-lang"
TEMPLATE_NEW_IMMEDIATE_JOB = "emails.new-immediate-job-admin"

# ── Push notification types ─────────────────────────────────────
PUSH_JOB_ACCEPTED = "job_accepted"
PUSH_JOB_CANCELLED = "job_cancelled"
PUSH_SESSION_START_REMIND = "session_start_remind"
PUSH_SUGGESTED_JOB = "suggested_job"


def _when(due: datetime) -> str:
    return due.strftime("%Y-%m-%d %H:%M")


def accepted_subject(job_id: int) -> str:
    return f"Bekräftelse - tolk har accepterat er bokning (bokning # {job_id})"


def reopened_subject(language: str, job_id: int) -> str:
    return f"Vi har nu återöppnat er bokning av {language}tolk för bokning #{job_id}"


def session_ended_subject(job_id: int) -> str:
    return f"Information om avslutad tolkning för bokningsnummer #{job_id}"


def cancelled_subject(job_id: int) -> str:
    return f"Avbokning av bokningsnr: #{job_id}"


def changed_translator_subject(job_id: int) -> str:
    return f"Meddelande om tilldelning av tolkuppdrag för uppdrag #{job_id}"


def changed_booking_subject(job_id: int) -> str:
    return f"Meddelande om ändring av tolkbokning för uppdrag #{job_id}"


def new_immediate_job_subject(job_id: int) -> str:
    return f"Ny akutbokning #{job_id}"


def session_start_remind_text(language: str, due: datetime, duration: int, town: str | None) -> str:
    where = f"på plats i {town}" if town is not None else "telefon"
    return (
        f"Detta är en påminnelse om att du har en {language}tolkning ({where}) "
        f"kl {due.strftime('%H:%M')} på {due.strftime('%Y-%m-%d')} som varar i {duration} min. "
        f"Lycka till och kom ihåg att ge feedback efter utförd tolkning!"
    )


def job_accepted_text(language: str, duration: int, due: datetime) -> str:
    return (
        f"Din bokning för {language} translators, {duration}min, {_when(due)} har accepterats "
        f"av en tolk. Vänligen öppna appen för att se detaljer om tolken."
    )


def customer_cancelled_text(language: str, duration: int, due: datetime) -> str:
    return (
        f"Kunden har avbokat bokningen för {language}tolk, {duration}min, {_when(due)}. "
        f"Var god och kolla dina tidigare bokningar för detaljer."
    )


def translator_cancelled_text(language: str, duration: int, due: datetime) -> str:
    return (
        f"Er {language}tolk, {duration}min {_when(due)}, har avbokat tolkningen. "
        f"Vi letar nu efter en ny tolk som kan ersätta denne. Tack."
    )


def suggested_job_text(language: str, duration: int, due: datetime, physical: bool) -> str:
    kind = "platstolkning" if physical else "telefontolkning"
    return f"Ny bokning för {language}tolk ({kind}) {duration}min {_when(due)}"


def suggested_job_sms(language: str, duration: int, due: datetime, job_id: int) -> str:
    return (
        f"Ny bokning #{job_id}: {language}tolk, {duration} min, {_when(due)}. "
        f"Logga in i appen för att acceptera uppdraget."
    )


def accept_success_text(language: str, duration: int, due: datetime) -> str:
    return f"Du har nu accepterat och fått bokningen för {language}tolk {duration}min {_when(due)}"


def already_taken_text(language: str, duration: int, due: datetime) -> str:
    return (
        f"Denna {language}tolkning {duration}min {_when(due)} har redan accepterats av annan tolk. "
        f"Du har inte fått denna tolkning"
    )


def already_booked_text(due: datetime) -> str:
    return f"Du har redan en bokning den tiden {_when(due)}. Du har inte fått denna tolkning"


def late_cancellation_text(support_phone: str, notice_hours: int) -> str:
    return (
        f"Du kan inte avboka en bokning som sker inom {notice_hours} timmar genom appen. "
        f"Vänligen ring på {support_phone} och gör din avbokning over telefon. Tack!"
    )
