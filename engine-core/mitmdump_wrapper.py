"""
mitmdump launcher for the ChHeader rule engine.
Starts mitmdump with the ChHeader addon loaded; extra arguments are passed through.
"""
import os
import sys

from mitmproxy.tools import main


def build_args(argv):
    addons_dir = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'addons')
    confdir = os.environ.get('MITMPROXY_CONFDIR', '~/.mitmproxy')
    listen_port = os.environ.get('CHHEADER_LISTEN_PORT', '8080')

    args = [
        'mitmdump',
        '--listen-port', listen_port,
        '--set', f'confdir={confdir}',
        '-s', os.path.join(addons_dir, 'entry.py'),
    ]
    args.extend(argv)
    return args


if __name__ == '__main__':
    # Enable unbuffered output for real-time logging
    sys.stdout.reconfigure(line_buffering=True)
    sys.stderr.reconfigure(line_buffering=True)

    sys.argv = build_args(sys.argv[1:])
    main.mitmdump()
