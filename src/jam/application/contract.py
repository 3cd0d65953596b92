CONTRACT_VERSION = "1.0.0"

COMMAND_INTENTS = (
    "new_season_intent",
    "load_intent",
    "choose_concept_intent",
    "instruct_intent",
    "finish_song_intent",
    "perform_release_intent",
    "book_gig_intent",
    "resolve_event_choice_intent",
    "restart_intent",
    "clear_save_intent",
)

QUERY_INTENTS = (
    "has_save",
    "get_career_view",
    "venue_options",
    "gig_options",
    "career_summary",
    "list_release_views",
    "list_calendar_views",
)

CONTRACT_DTO_TYPES = (
    "ActionResult",
    "CareerView",
    "VenueOptionView",
    "GigOptionView",
    "ReleaseView",
    "CareerSummaryView",
    "CalendarEventView",
)
