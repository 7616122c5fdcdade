"""Allow `python -m echobreaker`."""

from echobreaker.cli import main

if __name__ == '__main__':
    main()
