"""Routes inbound LINE text messages to command handlers."""

import datetime
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Optional

from linebot.v3.messaging.exceptions import ApiException
from linebot.v3.webhooks import MessageEvent, TextMessageContent
from loguru import logger

import aggregator
import replies
from aggregator import Window
from commands import COMMANDS, Command, CommandSpec, help_text
from line_client import LineMessenger
from recorder import RateLimited, Recorder


@dataclass(frozen=True)
class SourceContext:
    """Where a message came from and how to answer it."""
    user_id: str
    reply_token: str
    group_id: Optional[str] = None
    quote_token: Optional[str] = None

    @property
    def is_group(self) -> bool:
        return self.group_id is not None

    @classmethod
    def from_event(cls, event: MessageEvent) -> "SourceContext":
        source = event.source
        group_id = getattr(source, "group_id", None) if source.type == "group" else None
        return cls(
            user_id=source.user_id,
            reply_token=event.reply_token,
            group_id=group_id,
            quote_token=getattr(event.message, "quote_token", None),
        )


class Dispatcher:
    def __init__(
        self,
        messenger: LineMessenger,
        recorder: Recorder,
        table: Dict[Command, CommandSpec] = COMMANDS,
        clock: Callable[[], datetime.datetime] = datetime.datetime.now,
    ):
        self.messenger = messenger
        self.recorder = recorder
        self.table = table
        self.clock = clock

    def handle_events(self, events: Iterable) -> None:
        """Process one webhook delivery, one event at a time.

        A failure in one event is logged and does not stop the rest.
        """
        for event in events:
            if not isinstance(event, MessageEvent):
                logger.info("Non message event has come: {}", type(event).__name__)
                continue
            if not isinstance(event.message, TextMessageContent):
                logger.info("Non text message has come: {}", type(event.message).__name__)
                continue
            try:
                self.dispatch(event.message.text, SourceContext.from_event(event))
            except Exception:
                logger.exception("Failed to handle message event")

    def dispatch(self, text: str, context: SourceContext) -> None:
        command = Command.parse(text)
        spec = self.table.get(command) if command is not None else None
        if spec is None:
            logger.debug("Ignoring unrecognized message {!r}", text)
            return

        if not spec.allows(context.is_group):
            message = replies.ONE_TO_ONE_ONLY_MESSAGE if context.is_group else replies.GROUP_ONLY_MESSAGE
            self.reply(context, message)
            return

        logger.info("Dispatching {} for user {} (group={})", command.name, context.user_id, context.group_id)
        getattr(self, spec.handler)(context, spec)

    def reply(self, context: SourceContext, text: str) -> None:
        self.messenger.reply_text(context.reply_token, text, quote_token=context.quote_token)

    # Handlers

    def show_help(self, context: SourceContext, spec: CommandSpec) -> None:
        self.reply(context, help_text(self.table))

    def record(self, context: SourceContext, spec: CommandSpec) -> None:
        profile = self.messenger.get_profile(context.user_id, context.group_id)
        result = self.recorder.record(
            context.user_id,
            context.group_id,
            profile.display_name,
            spec.category,
            now=self.clock(),
        )
        if isinstance(result, RateLimited):
            self.reply(context, replies.format_rate_limited(profile.display_name, result.ttl_hours))
            return
        self.reply(context, replies.format_recorded(profile.display_name, result.today_count, result.total_count))

    def show_rank(self, context: SourceContext, spec: CommandSpec) -> None:
        now = self.clock()
        weekly = aggregator.rank(context.group_id, Window.WEEK, now)
        monthly = aggregator.rank(context.group_id, Window.MONTH, now)
        self.reply(context, replies.format_rank_board(weekly, monthly))

    def _show_window_rank(self, context: SourceContext, window: Window) -> None:
        entries = aggregator.rank(context.group_id, window, self.clock())
        self.reply(context, replies.format_ranking(window, entries))

    def show_daily_rank(self, context: SourceContext, spec: CommandSpec) -> None:
        self._show_window_rank(context, Window.TODAY)

    def show_weekly_rank(self, context: SourceContext, spec: CommandSpec) -> None:
        self._show_window_rank(context, Window.WEEK)

    def show_monthly_rank(self, context: SourceContext, spec: CommandSpec) -> None:
        self._show_window_rank(context, Window.MONTH)

    def show_summary(self, context: SourceContext, spec: CommandSpec) -> None:
        try:
            profile = self.messenger.get_profile(context.user_id, context.group_id)
        except ApiException as e:
            logger.error("Failed to load statistics: {}", e)
            self.reply(context, replies.SUMMARY_FAILED_MESSAGE)
            return
        summary = aggregator.summarize(context.user_id, context.group_id, self.clock())
        self.reply(context, replies.format_summary(profile.display_name, summary))

    def show_group_summary(self, context: SourceContext, spec: CommandSpec) -> None:
        summary = aggregator.group_summary(context.group_id, self.clock())
        self.reply(context, replies.format_group_summary(summary))

    def show_poop_king(self, context: SourceContext, spec: CommandSpec) -> None:
        king = aggregator.top_user(context.group_id, self.clock())
        if king is None:
            self.reply(context, replies.format_ranking(Window.WEEK, []))
            return

        profile = self.messenger.get_profile(king.user_id, context.group_id)
        if not profile.picture_url:
            self.reply(context, replies.KING_WITHOUT_PICTURE_MESSAGE)
            return
        self.messenger.reply_image(context.reply_token, profile.picture_url)
