import logging
import os
import sys
from pathlib import Path

import sass

SASS_DIR = os.environ.get('SASS_DIR', 'sass')
CSS_DIR = os.environ.get('CSS_DIR', 'css')

SOURCE_SUFFIX = '.scss'
OUTPUT_SUFFIX = '.css'
PARTIAL_PREFIX = '_'


def is_partial(path):
    return Path(path).name.startswith(PARTIAL_PREFIX)


def is_compilable(path):
    path = Path(path)
    return path.suffix == SOURCE_SUFFIX and not is_partial(path)


def map_source(source_path, sass_dir=SASS_DIR, css_dir=CSS_DIR):
    """
    Resolve a source file under sass_dir and map it to its .css file under css_dir.
    Returns (resolved source, output path).

    Raises OSError if either path can't be resolved (e.g. the file was deleted
    right after the event fired) and ValueError if the source isn't inside sass_dir.
    """
    root = Path(sass_dir).resolve(strict=True)
    source = Path(source_path).resolve(strict=True)
    relative = source.relative_to(root)
    return source, (Path(css_dir) / relative).with_suffix(OUTPUT_SUFFIX)


def output_path_for(source_path, sass_dir=SASS_DIR, css_dir=CSS_DIR):
    return map_source(source_path, sass_dir, css_dir)[1]


def compile_file(source_path, output_path, sass_dir=SASS_DIR):
    """
    Returns False if the source couldn't be compiled. Errors creating
    directories or writing the output are not caught.
    """
    logging.info("Compiling %s to %s", source_path, output_path)
    try:
        css = sass.compile(
            filename=str(source_path),
            output_style='compressed',
            include_paths=[str(sass_dir)],
        )
    except sass.CompileError as e:
        logging.error("Failed to compile %s: %s", source_path, e)
        return False
    except OSError as e:
        # source removed after it was resolved
        logging.error("Failed to read %s: %s", source_path, e)
        return False

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open('w', encoding='utf-8') as f:
        f.write(css)
    logging.info("Successfully compiled: %s", output_path)
    return True


def compile_changed(source_path, sass_dir=SASS_DIR, css_dir=CSS_DIR):
    """Compile one changed file, logging problems that only affect this file."""
    try:
        source, output_path = map_source(source_path, sass_dir, css_dir)
    except OSError as e:
        logging.error("Failed to resolve file path %s: %s", source_path, e)
        return False
    except ValueError:
        logging.error("File %s is not under input directory %s", source_path, sass_dir)
        return False
    return compile_file(source, output_path, sass_dir)


def compile_all(sass_dir=SASS_DIR, css_dir=CSS_DIR):
    """Returns the number of files that failed."""
    failed = 0
    for dirpath, dirnames, filenames in os.walk(sass_dir):
        dirnames.sort()
        for name in sorted(filenames):
            path = os.path.join(dirpath, name)
            if not is_compilable(path):
                continue
            if not compile_changed(path, sass_dir, css_dir):
                failed += 1
    return failed


def main():
    logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s %(message)s')
    if not os.path.isdir(SASS_DIR):
        sys.exit(f"Input directory {SASS_DIR} does not exist")
    os.makedirs(CSS_DIR, exist_ok=True)
    failed = compile_all(SASS_DIR, CSS_DIR)
    if failed:
        print(f"{failed} file(s) failed to compile")
        sys.exit(1)
    print("SCSS compilation successful.")


if __name__ == "__main__":
    main()
