"""Built-in UI strings used when the ui_text document lacks a key or is unavailable."""

from typing import Any, Dict, Mapping, Optional, Union

from cv_site.models.request_models import DEFAULT_LANGUAGE, Language

DEFAULT_UI_TEXT: Dict[str, Dict[str, str]] = {
    "en": {
        "page_title": "Curriculum Vitae",
        "not_available": "This section is currently not available.",
        "load_error_banner": "Content could not be loaded. Please try again later.",
        "not_found": "Entry not found.",
        "present": "Present",
        "view_details": "View Details",
        "previous": "Previous",
        "next": "Next",
        "slide": "Slide",
        "home": "Home",
        "career_title": "Career History",
        "academic_title": "Academic Background",
        "skills_title": "Skills & Expertise",
        "hard_skills": "Hard Skills",
        "soft_skills": "Soft Skills",
        "it_skills": "IT Skills",
        "timeline_page_title": "Career Timeline",
        "timeline_link_text": "View Full Timeline",
        "projects_title": "Projects",
        "contact_info": "Contact Information",
        "career_details_title": "Career Details",
        "academic_details_title": "Academic Details",
        "scope_responsibilities": "Scope & Responsibilities",
        "achievements": "Key Achievements",
        "star_examples": "Achievement Highlights (STAR)",
        "situation": "Situation",
        "target": "Target",
        "actions": "Actions",
        "result": "Result",
        "course_study": "Course of Study",
        "description": "Description",
        "diploma_grade": "Diploma & Grade",
        "feedback_success_message": "Thank you! Your message has been sent.",
        "feedback_error_message": "Sorry, there was an error. Please check your input.",
    },
    "de": {
        "page_title": "Lebenslauf",
        "not_available": "Dieser Abschnitt ist derzeit nicht verfügbar.",
        "load_error_banner": "Inhalte konnten nicht geladen werden. Bitte versuchen Sie es später erneut.",
        "not_found": "Eintrag nicht gefunden.",
        "present": "Heute",
        "view_details": "Details anzeigen",
        "previous": "Zurück",
        "next": "Weiter",
        "slide": "Folie",
        "home": "Startseite",
        "career_title": "Beruflicher Werdegang",
        "academic_title": "Akademischer Hintergrund",
        "skills_title": "Fähigkeiten & Kompetenzen",
        "hard_skills": "Fachkompetenzen",
        "soft_skills": "Soziale Kompetenzen",
        "it_skills": "IT-Kenntnisse",
        "timeline_page_title": "Karriere-Zeitleiste",
        "timeline_link_text": "Vollständige Zeitleiste anzeigen",
        "projects_title": "Projekte",
        "contact_info": "Kontaktinformationen",
        "career_details_title": "Karrieredetails",
        "academic_details_title": "Ausbildungsdetails",
        "scope_responsibilities": "Umfang & Verantwortlichkeiten",
        "achievements": "Wichtigste Erfolge",
        "star_examples": "Erfolgsbeispiele (STAR)",
        "situation": "Situation",
        "target": "Ziel",
        "actions": "Maßnahmen",
        "result": "Ergebnis",
        "course_study": "Studiengang",
        "description": "Beschreibung",
        "diploma_grade": "Abschluss & Note",
        "feedback_success_message": "Vielen Dank! Ihre Nachricht wurde gesendet.",
        "feedback_error_message": "Leider ist ein Fehler aufgetreten. Bitte prüfen Sie Ihre Eingaben.",
    },
    "fr": {
        "page_title": "Curriculum Vitae",
        "not_available": "Cette section n'est pas disponible pour le moment.",
        "load_error_banner": "Le contenu n'a pas pu être chargé. Veuillez réessayer plus tard.",
        "not_found": "Entrée introuvable.",
        "present": "Aujourd'hui",
        "view_details": "Voir les détails",
        "previous": "Précédent",
        "next": "Suivant",
        "slide": "Diapositive",
        "home": "Accueil",
        "career_title": "Parcours professionnel",
        "academic_title": "Formation académique",
        "skills_title": "Compétences & Expertise",
        "hard_skills": "Compétences techniques",
        "soft_skills": "Compétences humaines",
        "it_skills": "Compétences informatiques",
        "timeline_page_title": "Chronologie de carrière",
        "timeline_link_text": "Voir la chronologie complète",
        "projects_title": "Projets",
        "contact_info": "Coordonnées",
        "career_details_title": "Détails du poste",
        "academic_details_title": "Détails de la formation",
        "scope_responsibilities": "Périmètre & Responsabilités",
        "achievements": "Réalisations clés",
        "star_examples": "Exemples de réussite (STAR)",
        "situation": "Situation",
        "target": "Objectif",
        "actions": "Actions",
        "result": "Résultat",
        "course_study": "Cursus",
        "description": "Description",
        "diploma_grade": "Diplôme & Mention",
        "feedback_success_message": "Merci ! Votre message a été envoyé.",
        "feedback_error_message": "Désolé, une erreur s'est produite. Veuillez vérifier votre saisie.",
    },
}


def merge_ui_text(
    language: Union[Language, str],
    overrides: Optional[Mapping[str, Any]] = None
) -> Dict[str, str]:
    """Built-in strings for a language, overlaid with string values from a ui_text section.

    Args:
        language: Language code (en, de, fr). Unknown codes fall back to English.
        overrides: Parsed ui_text section; a nested ``ui_text`` mapping is unwrapped.

    Returns:
        Dictionary of UI strings.
    """
    lang = str(getattr(language, "value", language)).lower().strip()
    if lang not in DEFAULT_UI_TEXT:
        lang = DEFAULT_LANGUAGE.value

    text = dict(DEFAULT_UI_TEXT[lang])
    if isinstance(overrides, Mapping):
        nested = overrides.get("ui_text")
        source = nested if isinstance(nested, Mapping) else overrides
        for key, value in source.items():
            if isinstance(value, (str, int, float)) and not isinstance(value, bool):
                text[str(key)] = str(value)
    return text
