'''
Translation between application field names and the profile attribute names
of the provider (Simple Registration names such as nickname or fullname).
'''


class AttributeRequest(object):
    '''
    Provider attribute names to ask for, in the order they were configured.
    '''
    def __init__(self, mandatory=(), optional=()):
        self.mandatory = list(mandatory)
        self.optional = list(optional)

    def __bool__(self):
        return bool(self.mandatory or self.optional)

    def __eq__(self, other):
        return (isinstance(other, AttributeRequest) and
                self.mandatory == other.mandatory and
                self.optional == other.optional)

    def __repr__(self):
        return '<AttributeRequest mandatory=%r optional=%r>' % (self.mandatory, self.optional)


def provider_names(fields, field_mapping):
    '''
    Maps each application field name to its provider name. Names without a
    (non-empty) mapping are passed unchanged, empty names are dropped,
    repeated names are kept once.
    '''
    result = []
    for field in fields:
        if not field:
            continue
        name = field_mapping.get(field) or field
        if name not in result:
            result.append(name)
    return result


def build_request(mandatory_fields, optional_fields, field_mapping):
    mandatory = provider_names(mandatory_fields or [], field_mapping)
    optional = [
        name for name in provider_names(optional_fields or [], field_mapping)
        if name not in mandatory
    ]
    return AttributeRequest(mandatory, optional)


def invert(attributes, field_mapping):
    '''
    Renames provider attributes back to application field names. Only
    attributes that appear in the mapping are returned.
    '''
    return {
        field: attributes[name]
        for field, name in field_mapping.items()
        if name and name in attributes
    }
