import os

if os.name == 'nt':
    DEFAULT_CANDIDATE_DIRS = ('$TMPDIR', '$TMP', '$TEMP', '$USERPROFILE')
    DEFAULT_MAX_PATH_LENGTH = 260
else:
    DEFAULT_CANDIDATE_DIRS = ('$TMPDIR', '/tmp', '.', '~')
    DEFAULT_MAX_PATH_LENGTH = 4096


class SettingsManager:
    def __init__(self):
        self.settings = {
            'candidate_dirs': DEFAULT_CANDIDATE_DIRS,
            'dir_template': 'scratchXXXXXX',
            # Room kept free after the directory path for generated names
            'name_reserve': 22,
            'max_path_length': DEFAULT_MAX_PATH_LENGTH,
        }

    def update_settings(self, new_settings):
        unknown = set(new_settings) - set(self.settings)
        if unknown:
            raise KeyError(f"Unknown settings: {', '.join(sorted(unknown))}")
        if 'candidate_dirs' in new_settings:
            new_settings = dict(new_settings, candidate_dirs=tuple(new_settings['candidate_dirs']))
        if not new_settings.get('dir_template', 'X').endswith('X'):
            raise ValueError("dir_template must end with placeholder characters ('X')")
        self.settings.update(new_settings)

    def get_settings(self):
        return self.settings
