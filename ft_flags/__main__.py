from ft_flags.cli import run

if __name__ == "__main__":
    run()
