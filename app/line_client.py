"""Thin wrapper around the LINE Messaging API used for every outbound call.

One instance is created at startup and shared by all requests.
"""

from dataclasses import dataclass
from typing import Optional

from linebot.v3.messaging import (
    ApiClient,
    Configuration,
    ImageMessage,
    MessagingApi,
    ReplyMessageRequest,
    TextMessage,
)
from loguru import logger


@dataclass(frozen=True)
class Profile:
    user_id: str
    display_name: str
    picture_url: Optional[str] = None


class LineMessenger:
    def __init__(self, api: MessagingApi):
        self.api = api

    @classmethod
    def from_access_token(cls, access_token: str) -> "LineMessenger":
        configuration = Configuration(access_token=access_token)
        return cls(MessagingApi(ApiClient(configuration)))

    def reply_text(self, reply_token: str, text: str, quote_token: Optional[str] = None) -> None:
        message = TextMessage(text=text, quote_token=quote_token)
        self.api.reply_message(ReplyMessageRequest(reply_token=reply_token, messages=[message]))

    def reply_image(self, reply_token: str, image_url: str) -> None:
        message = ImageMessage(original_content_url=image_url, preview_image_url=image_url)
        self.api.reply_message(ReplyMessageRequest(reply_token=reply_token, messages=[message]))

    def get_profile(self, user_id: str, group_id: Optional[str] = None) -> Profile:
        """Look up a user, as a group member when group_id is given.

        Raises linebot ApiException when the platform refuses the lookup.
        """
        if group_id is not None:
            response = self.api.get_group_member_profile(group_id, user_id)
        else:
            response = self.api.get_profile(user_id)
        logger.debug("Fetched profile of {} (group={})", user_id, group_id)
        return Profile(
            user_id=response.user_id or user_id,
            display_name=response.display_name,
            picture_url=response.picture_url,
        )
