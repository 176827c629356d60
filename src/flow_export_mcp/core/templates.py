from __future__ import annotations

from typing import List

from .config import MAX_IPFIX_MESSAGE_LEN, MAX_TEMPLATE_ID, MIN_TEMPLATE_ID, Config, Template
from .errors import ConfigurationError, MessageLengthError, UnknownFieldError
from .fields import FieldRegistryEntry, lookup_field
from .models import FLOW_MESSAGE_OVERHEAD, FlowTemplate, FlowTemplateField, Header, TemplateMessage


def _resolve(template: Template) -> List[FieldRegistryEntry]:
    """
    Resolve every field of a template, in template order.

    The template id is attached to UnknownFieldError so the operator can
    find the entry in the config file.
    """
    entries: List[FieldRegistryEntry] = []
    for f in template.fields:
        try:
            entries.append(lookup_field(f.name))
        except UnknownFieldError:
            raise UnknownFieldError(f.name, template_id=template.id) from None
    return entries


def template_field_types(template_id: int, config: Config) -> List[int]:
    return [e.type_code for e in _resolve(config.template(template_id))]


def template_length(template_id: int, config: Config) -> int:
    """
    Byte length of one data record encoded with the given template.
    """
    return sum(e.length for e in _resolve(config.template(template_id)))


def build_template_message(config: Config) -> TemplateMessage:
    """
    Template message announcing every configured template.

    Templates appear in config order and fields keep their template order,
    so the same config always produces the same message. The first field
    that does not resolve aborts the whole message.
    """
    templates: List[FlowTemplate] = []
    for template in config.templates:
        fields = [
            FlowTemplateField(field_type=e.type_code, field_length=e.length)
            for e in _resolve(template)
        ]
        templates.append(FlowTemplate(template_id=template.id, fields=fields))

    return TemplateMessage(header=Header(sequence_number=0), templates=templates)


def records_per_message(record_length: int, template_id: int, config: Config) -> int:
    """
    How many records of record_length fit in one data message.

    Raises MessageLengthError when not even one record fits, since the
    fragmenter could otherwise never make progress.
    """
    if record_length <= 0:
        raise MessageLengthError(template_id, record_length, config.max_ipfix_message_len)

    n = (config.max_ipfix_message_len - FLOW_MESSAGE_OVERHEAD) // record_length
    if n <= 0:
        raise MessageLengthError(template_id, record_length, config.max_ipfix_message_len)
    return n


def validate_config(config: Config) -> None:
    """
    Check wire limits, resolve every template and check one record fits
    maxIpfixMessageLen.

    Run once after loading so a bad config fails at startup instead of
    on the first export.
    """
    if not FLOW_MESSAGE_OVERHEAD < config.max_ipfix_message_len <= MAX_IPFIX_MESSAGE_LEN:
        raise ConfigurationError(
            f"maxIpfixMessageLen must be between {FLOW_MESSAGE_OVERHEAD + 1} "
            f"and {MAX_IPFIX_MESSAGE_LEN}, got {config.max_ipfix_message_len}",
            details={"max_ipfix_message_len": config.max_ipfix_message_len},
        )

    for t in build_template_message(config).templates:
        if not MIN_TEMPLATE_ID <= t.template_id <= MAX_TEMPLATE_ID:
            raise ConfigurationError(
                f"template id {t.template_id} must be between {MIN_TEMPLATE_ID} and {MAX_TEMPLATE_ID}",
                details={"template_id": t.template_id},
            )
        records_per_message(t.record_length(), t.template_id, config)
