"""End-to-end resolution scenarios."""

import re
import pytest
from sqlblueprint import resolve
from sqlblueprint.contracts.descriptors import GeneratedIdentities, ResourceType
from sqlblueprint.identity.generator import IdentityGenerator
from sqlblueprint.utils.errors import ConfigError, IdentityGenerationError


class TestDefaultEntries:
    """Default database and user scenario."""

    def test_default_db_and_user_with_generated_password(self, base_config, generator, settings):
        result = resolve(
            {**base_config, "enable_default_db": True, "enable_default_user": True, "user_password": ""},
            settings=settings,
            generator=generator,
        )

        assert len(result.of_type(ResourceType.SQL_DATABASE_INSTANCE)) == 1
        databases = result.of_type(ResourceType.SQL_DATABASE)
        users = result.of_type(ResourceType.SQL_USER)
        assert [d.spec.name for d in databases] == ["default"]
        assert [u.spec.name for u in users] == ["default"]

        secret = generator.generate_fallback_secret(keyed_by="orders-db")
        assert users[0].spec.password == secret
        assert result.outputs.generated_user_password == secret
        assert result.of_type(ResourceType.PROJECT_IAM_MEMBER) == []

    def test_disabled_defaults(self, base_config, generator, settings):
        result = resolve(
            {**base_config, "enable_default_db": False, "enable_default_user": False},
            settings=settings,
            generator=generator,
        )

        assert result.of_type(ResourceType.SQL_DATABASE) == []
        assert result.of_type(ResourceType.SQL_USER) == []
        assert result.outputs.generated_user_password is None


class TestIamDeduplication:
    """Duplicate IAM identity scenario."""

    def test_duplicate_service_account(self, base_config, generator, settings):
        email = "serviceAccount:x@proj.iam.gserviceaccount.com"
        result = resolve(
            {**base_config, "iam_user_emails": [email, email], "enable_default_user": False},
            settings=settings,
            generator=generator,
        )

        assert len(result.of_type(ResourceType.PROJECT_IAM_MEMBER)) == 1
        assert len(result.of_type(ResourceType.SQL_USER)) == 1
        assert result.outputs.iam_user_names == ["x@proj.iam"]


class TestOutputs:
    """Test derived outputs and serialized shape."""

    def test_connection_name(self, base_config, generator, settings):
        result = resolve({**base_config, "region": "europe-west1"}, settings=settings, generator=generator)

        assert result.outputs.instance_connection_name == "my-project:europe-west1:orders-db"

    def test_resources_start_with_sentinel(self, base_config, generator, settings):
        result = resolve({**base_config, "module_depends_on": ["a", "b"]}, settings=settings, generator=generator)

        sentinel = result.resources[0]
        assert sentinel.type == ResourceType.DEPENDENCY_SENTINEL
        assert sentinel.spec.trigger == 2

    def test_json_dump_omits_absent_blocks(self, base_config, generator, settings):
        result = resolve(base_config, settings=settings, generator=generator)
        instance = result.model_dump(mode="json")["resources"][1]

        assert instance["type"] == "google_sql_database_instance"
        assert "network" not in instance["spec"]
        assert "retention" not in instance["spec"]["backup"]
        assert instance["field_policies"] == {"storage.disk_size": "ignore_drift"}


class TestIdempotence:
    """Test stability across passes."""

    def test_previous_identities_keep_name_and_password(self, base_config, settings):
        config = {**base_config, "random_instance_name": True}
        first = resolve(config, settings=settings)
        second = resolve(config, settings=settings, previous=first.generated)

        assert re.fullmatch(r"orders-db-[0-9a-f]{8}", first.outputs.instance_name)
        assert second.outputs.instance_name == first.outputs.instance_name
        assert second.outputs.generated_user_password == first.outputs.generated_user_password

    def test_rename_rotates_password(self, base_config, settings):
        first = resolve(base_config, settings=settings)
        renamed = resolve({**base_config, "name": "billing-db"}, settings=settings, previous=first.generated)

        assert renamed.outputs.generated_user_password != first.outputs.generated_user_password


class TestErrors:
    """Test fatal conditions."""

    def test_entropy_failure_aborts(self, base_config, settings):
        def broken(length):
            raise OSError("entropy exhausted")

        with pytest.raises(IdentityGenerationError):
            resolve(base_config, settings=settings, generator=IdentityGenerator(entropy=broken))

    def test_missing_required_field(self, settings):
        with pytest.raises(ConfigError, match="Invalid instance configuration"):
            resolve({"name": "x"}, settings=settings)

    def test_previous_unused_when_generator_given(self, base_config, generator, settings):
        result = resolve(
            base_config,
            settings=settings,
            generator=generator,
            previous=GeneratedIdentities(fallback_secret="ffffffffffffffff", fallback_secret_keeper="orders-db"),
        )

        assert result.outputs.generated_user_password != "ffffffffffffffff"
