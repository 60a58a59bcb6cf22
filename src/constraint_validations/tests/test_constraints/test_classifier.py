import pytest

from constraint_validations.constraints.classifier import (
    NO_METADATA,
    UNCLASSIFIED,
    Direction,
    FieldError,
    Fields,
    classify,
    field_for,
    parse_direction,
)
from constraint_validations.constraints.metadata import TableConstraintMetadata
from constraint_validations.exceptions.integrity_classifier import ViolationInfo, ViolationKind


def violation(kind, *, schema="public", table="albums", constraint=None, column=None, message=""):
    return ViolationInfo(
        kind=kind,
        reported_schema=schema,
        reported_table=table,
        constraint_name=constraint,
        column_name=column,
        message_text=message,
    )


class TestParseDirection:

    @pytest.mark.parametrize(
        "message, expected",
        [
            ('insert or update on table "albums" violates foreign key constraint "fk"', Direction.INSERT),
            ('update or delete on table "artists" violates foreign key constraint "fk" on table "albums"',
             Direction.UPDATE),
            ("  Insert or update on table", Direction.INSERT),
            ('delete on table "artists"', Direction.UNKNOWN),
            ("", Direction.UNKNOWN),
            (None, Direction.UNKNOWN),
        ],
    )
    def test_leading_verb(self, message, expected):
        assert parse_direction(message) is expected


class TestFieldFor:

    def test_single_column_is_bare(self):
        assert field_for(("email",)) == "email"

    def test_multiple_columns_are_a_tuple(self):
        assert field_for(("a", "b")) == ("a", "b")


class TestClassify:

    def test_no_metadata(self):
        result = classify(violation(ViolationKind.NOT_NULL, column="name"), None)
        assert result is NO_METADATA

    @pytest.mark.parametrize("kind", list(ViolationKind))
    def test_no_metadata_for_every_kind(self, kind):
        result = classify(violation(kind, constraint="x", column="x", message="insert"), None)
        assert result is NO_METADATA

    def test_not_null_uses_reported_column(self):
        metadata = TableConstraintMetadata(schema="public", table="albums")
        result = classify(violation(ViolationKind.NOT_NULL, column="name"), metadata)
        assert result == Fields((FieldError("name", "not_null"),))

    def test_not_null_without_column(self, album_metadata):
        assert classify(violation(ViolationKind.NOT_NULL), album_metadata) is UNCLASSIFIED

    def test_check_known_constraint(self, album_metadata):
        result = classify(
            violation(ViolationKind.CHECK, constraint="ck_albums_release_year_range"), album_metadata
        )
        assert result == Fields((FieldError("release_year", "check"),))

    def test_check_unknown_constraint(self, album_metadata):
        result = classify(violation(ViolationKind.CHECK, constraint="ck_other"), album_metadata)
        assert result is UNCLASSIFIED

    def test_check_without_constraint_name(self, album_metadata):
        assert classify(violation(ViolationKind.CHECK), album_metadata) is UNCLASSIFIED

    def test_unique_single_column_is_bare_field(self):
        metadata = TableConstraintMetadata(
            schema="public", table="users", unique_indexes={"uniq_email": ("email",)}
        )
        result = classify(violation(ViolationKind.UNIQUE, table="users", constraint="uniq_email"), metadata)
        assert result == Fields((FieldError("email", "unique"),))

    def test_unique_multi_column_is_tuple_field(self):
        metadata = TableConstraintMetadata(
            schema="public", table="pairs", unique_indexes={"uniq_pair": ("a", "b")}
        )
        result = classify(violation(ViolationKind.UNIQUE, table="pairs", constraint="uniq_pair"), metadata)
        assert result == Fields((FieldError(("a", "b"), "unique"),))

    def test_unique_expression_index_is_unclassified(self, album_metadata):
        # expression indexes never make it into the snapshot
        result = classify(violation(ViolationKind.UNIQUE, constraint="uq_lower_name"), album_metadata)
        assert result is UNCLASSIFIED

    def test_foreign_key_insert_direction(self, album_metadata):
        result = classify(
            violation(
                ViolationKind.FOREIGN_KEY,
                constraint="fk_albums_artist_id_artists",
                message='insert or update on table "albums" violates foreign key constraint',
            ),
            album_metadata,
        )
        assert result == Fields((FieldError("artist_id", "foreign_key"),), skip_schema_check=False)

    def test_foreign_key_update_direction_uses_referenced_by(self, artist_metadata):
        result = classify(
            violation(
                ViolationKind.FOREIGN_KEY,
                schema="public",
                table="albums",
                constraint="fk_albums_artist_id_artists",
                message='update or delete on table "artists" violates foreign key constraint',
            ),
            artist_metadata,
        )
        assert result == Fields((FieldError("id", "referenced_by"),), skip_schema_check=True)

    def test_foreign_key_update_direction_needs_matching_table(self, artist_metadata):
        result = classify(
            violation(
                ViolationKind.FOREIGN_KEY,
                schema="archive",
                table="albums",
                constraint="fk_albums_artist_id_artists",
                message="update or delete on table",
            ),
            artist_metadata,
        )
        assert result is UNCLASSIFIED

    def test_foreign_key_insert_direction_ignores_referenced_by(self, artist_metadata):
        result = classify(
            violation(
                ViolationKind.FOREIGN_KEY,
                table="albums",
                constraint="fk_albums_artist_id_artists",
                message="insert or update on table",
            ),
            artist_metadata,
        )
        assert result is UNCLASSIFIED

    def test_foreign_key_unknown_direction(self, album_metadata):
        result = classify(
            violation(
                ViolationKind.FOREIGN_KEY,
                constraint="fk_albums_artist_id_artists",
                message="la mise à jour ou la suppression viole la contrainte",
            ),
            album_metadata,
        )
        assert result is UNCLASSIFIED

    def test_quoted_constraint_name_is_canonicalized(self, album_metadata):
        result = classify(
            violation(ViolationKind.CHECK, constraint='"ck_albums_release_year_range"'), album_metadata
        )
        assert result == Fields((FieldError("release_year", "check"),))
