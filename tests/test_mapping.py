"""
Object mapping: type maps, configuration validation and the mapper.
"""

from dataclasses import dataclass, field
from typing import List, Optional

import pytest

from adminkit.faults import MappingConfigFault, UnmappedTypeFault
from adminkit.mapping import (
    BaseMapperConfig,
    MapperConfiguration,
    MapperProfile,
    TypeMap,
    members_of,
    read_member,
)
from forum_admin.mapping import ForumDto, ForumMapperConfig, PostDto
from forum_admin.models import AdminForumModel, Forum, ForumUser, Post


@dataclass
class Source:
    id: int = 0
    name: str = ""
    tags: List[str] = field(default_factory=list)


@dataclass
class Target:
    id: int = 0
    label: str = ""


class Plain:
    id: int
    _hidden: str


# ============================================================================
# Member helpers
# ============================================================================

class TestMembers:

    def test_dataclass_members(self):
        assert members_of(Source) == ["id", "name", "tags"]

    def test_admin_model_members(self):
        assert members_of(AdminForumModel)[:3] == ["id", "sort_index", "name"]

    def test_annotated_class_members(self):
        assert members_of(Plain) == ["id"]

    def test_read_member(self):
        post = Post(author=ForumUser(name="ann"))
        assert read_member(post, "author.name") == "ann"
        assert read_member(Post(), "author.name") is None
        assert read_member({"a": {"b": 1}}, "a.b") == 1


# ============================================================================
# Configuration
# ============================================================================

class TestMapperConfiguration:

    def test_explicit_member(self):
        type_map = TypeMap(Source, Target).for_member("label", "name")
        mapper = MapperConfiguration(maps=[type_map]).create_mapper()
        assert mapper.map(Source(id=1, name="n"), Target) == Target(id=1, label="n")

    def test_unmapped_destination_member(self):
        with pytest.raises(MappingConfigFault) as exc_info:
            MapperConfiguration(maps=[TypeMap(Source, Target)])
        assert exc_info.value.errors == ["Source -> Target: destination member 'label' is not mapped"]

    def test_all_errors_are_reported(self):
        type_map = (
            TypeMap(Source, Target)
            .for_member("label", "missing")
            .for_member("nothing", "name")
        )
        with pytest.raises(MappingConfigFault) as exc_info:
            MapperConfiguration(maps=[type_map])
        assert len(exc_info.value.errors) == 2
        assert exc_info.value.code == "MAPPING_CONFIG_INVALID"

    def test_duplicate_pair(self):
        maps = [TypeMap(Source, Target).ignore("label"), TypeMap(Source, Target).ignore("label")]
        with pytest.raises(MappingConfigFault, match="registered more than once"):
            MapperConfiguration(maps=maps)

    def test_for_member_needs_one_source(self):
        with pytest.raises(MappingConfigFault):
            TypeMap(Source, Target).for_member("label")
        with pytest.raises(MappingConfigFault):
            TypeMap(Source, Target).for_member("label", "name", resolve=lambda s: s.name)

    def test_ignore_and_constant(self):
        config = MapperConfiguration(maps=[
            TypeMap(Source, Target).ignore("id").constant("label", "fixed"),
        ])
        assert config.create_mapper().map(Source(id=9), Target) == Target(id=0, label="fixed")

    def test_sealed_maps_cannot_change(self):
        type_map = TypeMap(Source, Target).ignore("label")
        MapperConfiguration(maps=[type_map])
        with pytest.raises(MappingConfigFault, match="sealed"):
            type_map.ignore("id")

    def test_configuration_is_read_only(self):
        config = MapperConfiguration(maps=[TypeMap(Source, Target).ignore("label")])
        with pytest.raises(TypeError):
            config.type_maps[(Target, Source)] = None
        assert len(config) == 1

    def test_subclass_uses_base_map(self):
        class SpecialSource(Source):
            pass

        config = MapperConfiguration(maps=[TypeMap(Source, Target).ignore("label")])
        assert config.create_mapper().map(SpecialSource(id=3), Target).id == 3

    def test_unmapped_pair(self):
        mapper = MapperConfiguration().create_mapper()
        with pytest.raises(UnmappedTypeFault) as exc_info:
            mapper.map(Source(), Target)
        assert exc_info.value.message == "No mapping registered from Source to Target"

    def test_profiles_by_class_or_instance(self):
        class Profile(MapperProfile):
            def configure(self):
                self.create_map(Source, Target).for_member("label", resolve=lambda s: s.name.upper())

        for profile in (Profile, Profile()):
            mapper = MapperConfiguration(profiles=[profile]).create_mapper()
            assert mapper.map(Source(name="x"), Target).label == "X"


class TestBaseMapperConfig:

    def test_must_register(self):
        class Lazy(BaseMapperConfig):
            def register_mappings(self):
                pass

        with pytest.raises(MappingConfigFault, match="did not register"):
            Lazy()

    def test_registers_only_once(self):
        class Twice(BaseMapperConfig):
            def register_mappings(self):
                self.register_configuration(MapperConfiguration())
                self.register_configuration(MapperConfiguration())

        with pytest.raises(MappingConfigFault, match="already registered"):
            Twice()

    def test_cannot_instantiate_base(self):
        with pytest.raises(TypeError):
            BaseMapperConfig()


# ============================================================================
# Forum mappings
# ============================================================================

class TestForumMappings:

    @pytest.fixture
    def mapper(self):
        return ForumMapperConfig().create_mapper()

    def test_forum_dto(self, mapper):
        forum = Forum(id=3, name="General", managers_only_posting=True)
        assert mapper.map(forum, ForumDto) == ForumDto(
            forum_id=3, forum_name="General", managers_only_posting=True,
        )

    def test_post_dto(self, mapper):
        post = Post(id=7, forum_id=3, user_id=2, title="Hi", content="Body",
                    author=ForumUser(id=2, name="ann"), comments=["a", "b"],
                    create_date="2024-05-01T12:00:00+00:00")
        dto = mapper.map(post, PostDto)
        assert dto.post_id == 7
        assert dto.user_name == "ann"
        assert dto.comments_count == 2
        assert dto.create_date == "2024-05-01T12:00:00+00:00"

    def test_post_without_author(self, mapper):
        assert mapper.map(Post(), PostDto).user_name is None

    def test_map_many(self, mapper):
        forums = [Forum(id=1, name="a"), Forum(id=2, name="b")]
        assert [dto.forum_id for dto in mapper.map_many(forums, ForumDto)] == [1, 2]

    def test_reverse_direction_is_unmapped(self, mapper):
        with pytest.raises(UnmappedTypeFault):
            mapper.map(ForumDto(1, "a", False), Forum)

    def test_mapping_twice_gives_equal_fresh_outputs(self, mapper):
        post = Post(id=7, forum_id=3, user_id=2, title="Hi", content="Body",
                    author=ForumUser(id=2, name="ann"), comments=["a"])
        first = mapper.map(post, PostDto)
        second = mapper.map(post, PostDto)
        assert first == second
        assert first is not second

    def test_mappers_from_one_config_agree(self):
        config = ForumMapperConfig()
        forum = Forum(id=4, name="News")
        assert config.create_mapper().map(forum, ForumDto) == config.create_mapper().map(forum, ForumDto)
