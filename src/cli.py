import argparse
import sys


class CLI:
    """CLI describes a command line interface for interacting.
    """

    def __init__(self, argv=None):
        argv = sys.argv[1:] if argv is None else list(argv)
        parser = argparse.ArgumentParser(
            description="audio meta-learning data tools",
            usage="%(prog)s {class_split,episodes,find_bad,pcm_stats} [options]",
        )
        parser.add_argument("command", help="Subcommand to run")
        # parse_args defaults to [1:] for args, but you need to
        # exclude the rest of the args too, or validation will fail
        args = parser.parse_args(argv[:1])
        if args.command.startswith("_") or not hasattr(self, args.command):
            print("Unrecognized command")
            parser.print_help()
            sys.exit(1)
        self.argv = argv[1:]
        # use dispatch pattern to invoke method with same name
        getattr(self, args.command)()

    def class_split(self):
        import class_split

        class_split.cli(self.argv)

    def episodes(self):
        import episodes

        episodes.cli(self.argv)

    def find_bad(self):
        import find_bad

        find_bad.cli(self.argv)

    def pcm_stats(self):
        import pcm_stats

        pcm_stats.cli(self.argv)


def main():
    CLI()


if __name__ == "__main__":
    main()
