# SPDX-License-Identifier: MIT

import uuid

type EntityId = str

TEMPORARY_ID_PREFIX = "temp-"


def generate_entity_id() -> EntityId:
    return str(uuid.uuid4())


def generate_temporary_id() -> EntityId:
    return f"{TEMPORARY_ID_PREFIX}{uuid.uuid4()}"


def is_temporary_id(id: EntityId) -> bool:
    return id.startswith(TEMPORARY_ID_PREFIX)
