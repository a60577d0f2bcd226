"""Forum DTO mappings for the public API."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from adminkit.mapping import BaseMapperConfig, MapperProfile

from .models import Forum, Post


@dataclass
class ForumDto:
    forum_id: int
    forum_name: str
    managers_only_posting: bool


@dataclass
class PostDto:
    post_id: int
    forum_id: int
    user_id: int
    user_name: Optional[str]
    title: str
    content: str
    comments_count: int
    create_date: Optional[str] = None


class ForumProfile(MapperProfile):

    def configure(self):
        self.create_map(Forum, ForumDto) \
            .for_member("forum_id", "id") \
            .for_member("forum_name", "name")

        self.create_map(Post, PostDto) \
            .for_member("post_id", "id") \
            .for_member("user_name", "author.name") \
            .for_member("comments_count", resolve=lambda post: len(post.comments))


class ForumMapperConfig(BaseMapperConfig):

    def register_mappings(self):
        self.register_configuration([ForumProfile])
