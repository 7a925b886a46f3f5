"""
Revisio Backend — Localized User-Facing Messages
=================================================

What:  Every string the service shows to a user, in English, German and
       French: failure placeholders of both stages and orchestrator
       notifications.
How:   Plain lookup tables keyed by Language; render_* helpers turn an
       explicit StageFailure into displayable content.
Who:   Used by the stage outcomes (to_response) and by RevisionService.

The stages never put these strings into their results themselves; failures
stay explicit until a caller asks for a displayable rendering.
"""

from typing import Dict

from revisio.schemas.revision import Language, RevisionPoint


LANGUAGE_NAMES: Dict[Language, str] = {
    Language.EN: "English",
    Language.DE: "German",
    Language.FR: "French",
}


# ── Extraction placeholders ───────────────────────────────────────────────

_EXTRACTION_SCHEMA = {
    Language.EN: (
        "Extraction Error",
        "The AI could not return valid revision points.",
        "Output was",
    ),
    Language.DE: (
        "Extraktionsfehler",
        "Die KI konnte keine gültigen Revisionspunkte zurückgeben.",
        "Ausgabe war",
    ),
    Language.FR: (
        "Erreur d'Extraction",
        "L'IA n'a pas pu retourner de points de révision valides.",
        "Sortie reçue",
    ),
}

_EXTRACTION_UPSTREAM = {
    Language.EN: (
        "Critical Extraction Error",
        "A critical error occurred while extracting revision points.",
        "Details: {detail}. Please check the server logs.",
    ),
    Language.DE: (
        "Kritischer Extraktionsfehler",
        "Beim Extrahieren der Revisionspunkte ist ein kritischer Fehler aufgetreten.",
        "Details: {detail}. Bitte überprüfen Sie die Server-Logs.",
    ),
    Language.FR: (
        "Erreur d'Extraction Critique",
        "Une erreur critique est survenue lors de l'extraction des points de révision.",
        "Détails: {detail}. Veuillez vérifier les logs du serveur.",
    ),
}

# ── Supplementation placeholders ──────────────────────────────────────────

_SUPPLEMENTATION_SCHEMA = {
    Language.EN: (
        "Generation Error",
        "The AI did not return the expanded revision content in the expected form.",
        "Output was",
    ),
    Language.DE: (
        "Generierungsfehler",
        "Die KI hat den erweiterten Inhalt nicht in der erwarteten Form zurückgegeben.",
        "Ausgabe war",
    ),
    Language.FR: (
        "Erreur de Génération",
        "L'IA n'a pas retourné le contenu enrichi sous la forme attendue.",
        "Sortie reçue",
    ),
}

_SUPPLEMENTATION_UPSTREAM = {
    Language.EN: (
        "Critical Internal System Error",
        "A critical error occurred while communicating with the AI service to "
        "supplement the content: {detail}",
        "Please check the server logs and try again later.",
    ),
    Language.DE: (
        "Kritischer interner Systemfehler",
        "Bei der Kommunikation mit dem KI-Dienst zur Ergänzung des Inhalts ist ein "
        "kritischer Fehler aufgetreten: {detail}",
        "Bitte überprüfen Sie die Server-Logs und versuchen Sie es später erneut.",
    ),
    Language.FR: (
        "Erreur Interne Critique du Système",
        "Une erreur critique est survenue lors de la communication avec le service "
        "d'IA pour supplémenter le contenu: {detail}",
        "Veuillez vérifier les logs du serveur et réessayer plus tard.",
    ),
}

_UNKNOWN_ERROR = {
    Language.EN: "Unknown error",
    Language.DE: "Unbekannter Fehler",
    Language.FR: "Erreur inconnue",
}


def render_extraction_failure(kind: str, detail: str, language: Language) -> RevisionPoint:
    """
    Render an extraction failure as a single placeholder revision point.

    The detail (raw model output or error text) is embedded in the summary so
    the failure stays diagnosable from the rendered sheet.
    """
    if kind == "schema_violation":
        title, summary, label = _EXTRACTION_SCHEMA[language]
        return RevisionPoint(title=title, summary=f"{summary} ({label}: {detail})")

    title, summary, tail = _EXTRACTION_UPSTREAM[language]
    detail = detail or _UNKNOWN_ERROR[language]
    return RevisionPoint(title=title, summary=f"{summary} {tail.format(detail=detail)}")


def render_supplementation_failure(kind: str, detail: str, language: Language) -> str:
    """Render a supplementation failure as Markdown with a visible error heading."""
    if kind == "schema_violation":
        heading, message, label = _SUPPLEMENTATION_SCHEMA[language]
        return f"## {heading}\n\n{message} ({label}: {detail})"

    heading, message, retry = _SUPPLEMENTATION_UPSTREAM[language]
    detail = detail or _UNKNOWN_ERROR[language]
    return f"## {heading}\n\n{message.format(detail=detail)}\n\n{retry}"


# ── Orchestrator notifications ───────────────────────────────────────────
# Keys: (title, description). Descriptions may take {detail}.

NOTIFICATIONS: Dict[str, Dict[Language, tuple]] = {
    "extraction_started": {
        Language.EN: ("Step 1/2: Extracting key points...", "The AI is analysing your content."),
        Language.DE: ("Schritt 1/2: Kernpunkte werden extrahiert...", "Die KI analysiert Ihren Inhalt."),
        Language.FR: ("Étape 1/2: Extraction des points clés...", "L'IA analyse votre contenu."),
    },
    "supplementation_started": {
        Language.EN: ("Step 2/2: Enriching the content...", "The AI is adding details and explanations."),
        Language.DE: ("Schritt 2/2: Inhalt wird angereichert...", "Die KI ergänzt Details und Erklärungen."),
        Language.FR: ("Étape 2/2: Enrichissement du contenu...", "L'IA ajoute des détails et des explications."),
    },
    "completed": {
        Language.EN: ("Revision sheet generated!", "Your sheet is ready to view and export."),
        Language.DE: ("Lernblatt erstellt!", "Ihr Blatt ist bereit zur Ansicht und zum Export."),
        Language.FR: ("Fiche de révision générée!", "Votre fiche est prête à être consultée et exportée."),
    },
    "supplementation_failed": {
        Language.EN: ("Content enrichment failed", "The sheet shows the error details. Please try again."),
        Language.DE: ("Anreicherung fehlgeschlagen", "Das Blatt zeigt die Fehlerdetails. Bitte versuchen Sie es erneut."),
        Language.FR: ("Échec de l'enrichissement", "La fiche affiche les détails de l'erreur. Veuillez réessayer."),
    },
    "generation_failed": {
        Language.EN: ("Generation error", "{detail}"),
        Language.DE: ("Generierungsfehler", "{detail}"),
        Language.FR: ("Erreur de génération", "{detail}"),
    },
}

MESSAGES: Dict[str, Dict[Language, str]] = {
    "bad_image": {
        Language.EN: "Every image must be a data URI of the form 'data:<mimetype>;base64,<data>'.",
        Language.DE: "Jedes Bild muss eine Data-URI der Form 'data:<mimetype>;base64,<data>' sein.",
        Language.FR: "Chaque image doit être une URI de données de la forme 'data:<mimetype>;base64,<data>'.",
    },
    "missing_content": {
        Language.EN: "Invalid content. Please provide text or at least one image.",
        Language.DE: "Ungültiger Inhalt. Bitte geben Sie Text oder mindestens ein Bild an.",
        Language.FR: "Contenu invalide. Veuillez fournir du texte ou au moins une image.",
    },
    "text_too_short": {
        Language.EN: "The text must contain at least {min_length} characters.",
        Language.DE: "Der Text muss mindestens {min_length} Zeichen enthalten.",
        Language.FR: "Le texte doit contenir au moins {min_length} caractères.",
    },
    "no_points": {
        Language.EN: "The AI could not extract relevant revision points from your content.",
        Language.DE: "Die KI konnte keine relevanten Revisionspunkte aus Ihrem Inhalt extrahieren.",
        Language.FR: "L'IA n'a pas pu extraire de points de révision pertinents de votre contenu.",
    },
    "unexpected": {
        Language.EN: "An error occurred while generating the sheet.",
        Language.DE: "Beim Erstellen des Blatts ist ein Fehler aufgetreten.",
        Language.FR: "Une erreur est survenue lors de la génération de la fiche.",
    },
}


def message(key: str, language: Language, **kwargs) -> str:
    return MESSAGES[key][language].format(**kwargs)


def notification_text(key: str, language: Language, **kwargs) -> tuple:
    title, description = NOTIFICATIONS[key][language]
    return title, description.format(**kwargs)
