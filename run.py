# @Description: run demo

import os
import sys

from watercolor import run_pipeline


def run_demo(config_path=None):
    """
    run demo

    description:
        this is a demo for the watercolor pipeline

    step:
        1. read input/output paths and params from yaml
        2. run the watercolor pipeline
        3. write the output image

    usage:
        python run.py [config.yaml]
    """
    root_path = os.path.dirname(os.path.abspath(__file__))
    yaml_path = config_path or os.path.join(root_path, 'pipeline_config.yaml')
    return run_pipeline(yaml_path)


if __name__ == "__main__":
    run_demo(sys.argv[1] if len(sys.argv) > 1 else None)
