"""
MCP Interface Layer using fastmcp: one tool per user-triggered journal action.
"""
from typing import Any, Dict, Optional

from fastmcp import FastMCP

from manasika.app import ManasikaApp
from manasika.utils.config import AppConfig, config
from manasika.utils.health_check import get_health_status
from manasika.utils.logging_config import get_logger

logger = get_logger(__name__)


def create_server(app: ManasikaApp) -> FastMCP:
    """Build the MCP server around an application context.

    Args:
        app: Application context the tools act on

    Returns:
        FastMCP server with the journal tools registered
    """
    mcp = FastMCP('Manasika Wellness Journal')

    @mcp.tool()
    def log_mood(mood: int, note: Optional[str] = None, date: Optional[str] = None) -> Dict[str, Any]:
        """Log a mood rating from 1 (very low) to 5 (very high) with an optional note and ISO date (default today)."""
        return app.log_mood(mood, note, date)

    @mcp.tool()
    def update_mood(entry_id: str,
                    mood: Optional[int] = None,
                    note: Optional[str] = None,
                    date: Optional[str] = None) -> Dict[str, Any]:
        """Edit the mood, note or date of an existing entry."""
        fields = {name: value for name, value in (('mood', mood), ('note', note), ('date', date)) if value is not None}
        return app.update_mood(entry_id, **fields)

    @mcp.tool()
    def delete_mood(entry_id: str, confirm: bool = False) -> Dict[str, Any]:
        """Delete an entry. Nothing happens unless confirm is true."""
        return app.delete_mood(entry_id, confirm)

    @mcp.tool()
    def list_moods(mood: Optional[int] = None, sort_by: str = 'date') -> Dict[str, Any]:
        """Mood history, optionally filtered to one level and sorted by 'date' or 'mood'."""
        return app.list_moods(mood, sort_by)

    @mcp.tool()
    def mood_stats() -> Dict[str, Any]:
        """Average mood, entry count, weekly trend and positive-day streak."""
        return app.mood_stats()

    @mcp.tool()
    def mood_chart(days: int = 7) -> Dict[str, Any]:
        """One point per day for the last N days; value 0 means no entry."""
        return app.mood_chart(days)

    @mcp.tool()
    def mood_distribution() -> Dict[str, Any]:
        """Number of entries at each mood level."""
        return app.mood_distribution()

    @mcp.tool()
    def mood_triggers() -> Dict[str, Any]:
        """Most frequent keywords in notes of low-mood entries."""
        return app.mood_triggers()

    @mcp.tool()
    def send_chat_message(text: str) -> Dict[str, Any]:
        """Talk to the wellness companion."""
        return app.send_chat_message(text)

    @mcp.tool()
    def chat_history() -> Dict[str, Any]:
        """Welcome message followed by the recent conversation."""
        return app.chat_history()

    @mcp.tool()
    def clear_chat(confirm: bool = False) -> Dict[str, Any]:
        """Clear the conversation. Nothing happens unless confirm is true."""
        return app.clear_chat(confirm)

    @mcp.tool()
    def get_profile() -> Dict[str, Any]:
        """Current profile and preferences."""
        return app.get_profile()

    @mcp.tool()
    def save_profile(name: Optional[str] = None,
                     email: Optional[str] = None,
                     daily_reminders: Optional[bool] = None,
                     weekly_insights: Optional[bool] = None,
                     ai_suggestions: Optional[bool] = None,
                     language: Optional[str] = None,
                     theme: Optional[str] = None) -> Dict[str, Any]:
        """Update the profile; language is 'en' or 'hi', theme is 'light' or 'dark'."""
        preferences = {
            'daily_reminders': daily_reminders,
            'weekly_insights': weekly_insights,
            'ai_suggestions': ai_suggestions,
            'language': language,
            'theme': theme,
        }
        return app.save_profile(name=name, email=email, **{k: v for k, v in preferences.items() if v is not None})

    @mcp.tool()
    def export_mood_csv() -> Dict[str, Any]:
        """Mood history as CSV text."""
        return app.export_mood_csv()

    @mcp.tool()
    def export_data_json() -> Dict[str, Any]:
        """Profile and all entries as a JSON document."""
        return app.export_data_json()

    @mcp.tool()
    def clear_all_data(confirm: bool = False) -> Dict[str, Any]:
        """Erase the profile, entries and chat history. Nothing happens unless confirm is true."""
        return app.clear_all_data(confirm)

    @mcp.tool()
    def health() -> Dict[str, Any]:
        """Health of the blob store and the hosted companion."""
        return get_health_status(app.config, app.storage)

    return mcp


def main(app_config: AppConfig = config) -> None:
    app = ManasikaApp(app_config)
    mcp = create_server(app)

    transport = app_config.mcp.transport
    logger.info(f'Starting MCP server with {transport} transport, companion provider: {app.engine.provider_name}')
    if transport == 'stdio':
        mcp.run(transport=transport)
    else:
        mcp.run(transport=transport, host=app_config.mcp.host, port=app_config.mcp.port)


if __name__ == '__main__':
    main()
