"""
Packing of several keyed values into a single ``utme`` parameter.

Each project is rendered as a block of ``index:value`` pairs::

    8!1:name*2:other,9!1:value*2:value2,11!2:2

Numeric values of a project follow its keys in a separate block marked with
``v``, e.g. ``5!1:category*2:action,5v!1:42``.
"""

KEY = 'k'
VALUE = 'v'

DELIM_PROJECT = '!'
DELIM_PAIR = ':'
DELIM_SET = '*'
DELIM_BLOCK = ','

escape_char_map = {
    '!': '%21',
    '*': '%2A',
    "'": '%27',
    '(': '%28',
    ')': '%29',
    ',': '%2C',
}

# Custom variables
CUSTOMVAR_NAME_PROJECT_ID = 8
CUSTOMVAR_VALUE_PROJECT_ID = 9
CUSTOMVAR_SCOPE_PROJECT_ID = 11

# Events
EVENT_PROJECT_ID = 5
OBJECT_KEY_NUM = 1
TYPE_KEY_NUM = 2
LABEL_KEY_NUM = 3
VALUE_VALUE_NUM = 1

# Site speed
SITESPEED_PROJECT_ID = 14


def escape_value(value):
    return ''.join(escape_char_map.get(char, char) for char in str(value))


class X10(object):

    def __init__(self):
        self.project_data = {}

    def _project(self, project_id):
        return self.project_data.setdefault(project_id, {KEY: {}, VALUE: {}})

    def _clear(self, project_id, data_type):
        self._project(project_id)[data_type] = {}

    def _set(self, project_id, data_type, num, value):
        if value is None or value == '':
            return
        self._project(project_id)[data_type][int(num)] = value

    def clear_key(self, project_id):
        self._clear(project_id, KEY)

    def clear_value(self, project_id):
        self._clear(project_id, VALUE)

    def set_key(self, project_id, num, value):
        self._set(project_id, KEY, num, value)

    def set_value(self, project_id, num, value):
        self._set(project_id, VALUE, num, value)

    def get_key(self, project_id, num):
        return self.project_data.get(project_id, {}).get(KEY, {}).get(num)

    def get_value(self, project_id, num):
        return self.project_data.get(project_id, {}).get(VALUE, {}).get(num)

    def has_project(self, project_id):
        project = self.project_data.get(project_id)
        return bool(project and (project[KEY] or project[VALUE]))

    def render_data(self, prefix, data):
        pairs = ['%d%s%s' % (num, DELIM_PAIR, escape_value(data[num]))
                 for num in sorted(data)]
        return prefix + DELIM_PROJECT + DELIM_SET.join(pairs)

    def render_url_string(self):
        """
        Render all projects that hold at least one entry. An encoder without
        entries renders as an empty string.
        """
        blocks = []
        for project_id, project in self.project_data.items():
            if project[KEY]:
                blocks.append(self.render_data(str(project_id), project[KEY]))
            if project[VALUE]:
                blocks.append(self.render_data('%d%s' % (project_id, VALUE),
                                               project[VALUE]))
        return DELIM_BLOCK.join(blocks)
