from __future__ import annotations

__all__ = ["IDs"]


class IDs:
    class Store:
        SESSION_ID = "session-id"

    class Control:
        # Data actions
        FETCH_API_BTN = "fetch-api-btn"
        UPLOAD = "upload-csv"
        UPLOAD_BTN = "upload-csv-btn"
        GENERATE_BTN = "generate-btn"
        GENERATE_COUNT = "generate-count"
        RESET_BTN = "reset-btn"
        APPEND_SWITCH = "append-switch"

        # Selection
        CLEAR_SELECTION_BTN = "clear-selection-btn"

        # Graphs + details
        MAP_GRAPH = "map-graph"
        SCATTER_GRAPH = "scatter-graph"
        DETAILS_PANEL = "details-panel"

        # Status bar
        STATUS_BANNER = "status-banner"
        RECORD_COUNTER = "record-counter"
