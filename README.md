# stew

`stew` installs compiled binaries from GitHub releases or from any download
URL. It picks the release asset that matches your operating system and
architecture and extracts it. It then copies the binary into a directory on
your `PATH` and records the install in a lock file. You can use that lock file
to rebuild the same set of binaries on another machine. Each recorded binary
carries a SHA-256 hash, which is checked on such a reinstall.

## Installation

```
pip install .
```

The command is then available as `stew`. You can also run it as
`python -m stew.cli`.

If the `lsar` and `unar` programs are both on your `PATH`, stew uses them to
detect and extract archives. Without them stew handles these formats itself:

* tar archives, compressed or not
* zip archives
* single files compressed with gzip, bzip2 or xz

A download that is not an archive is treated as the binary itself.

## Usage

```
stew install <owner>/<repo>[@tag]   # install from a GitHub release
stew install <url>                  # install straight from a URL
stew install name:<owner>/<repo>    # install and name the binary
stew install name:<url>
stew install path/to/Stewfile       # install every entry in a Stewfile
stew install path/to/Stewfile.lock.json
stew search <terms>...              # search GitHub, then pick a project to install
stew browse <owner>/<repo>          # pick a release and asset by hand
stew upgrade <binary>               # upgrade one binary
stew upgrade --all                  # upgrade every binary
stew uninstall <binary>             # remove one binary and its asset
stew uninstall --all                # remove every binary
stew rename <binary>                # rename an installed binary
stew list [--tags]                  # list installed binaries
stew config                         # change the stew settings
stew --version
```

Most commands also have a short alias: `i`, `s`, `b`, `up`, `un`, `re` and `ls`.
If a command fails, stew prints the error to standard error and exits with
status 1.

### Choosing releases and assets

* **Tag.** With no tag, or the tag `latest`, stew installs the newest release
  that is not a prerelease. If the tag you ask for does not exist, stew asks
  you to choose a release.
* **Asset.** stew matches asset names against your OS and architecture and
  ignores checksum files (`.sha256`, `.sha512`, `.sha256sum`, `.sha512sum`).
  On Apple Silicon it falls back to a single amd64 macOS asset. If it still
  cannot decide, it asks you to choose.
* **Binary.** If an archive does not hold exactly one executable file, stew
  asks you to choose one and name it.

Prompts are numbered text menus. Press Enter to accept the default.

`stew upgrade` moves a binary to the newest non-prerelease tag. It reports an
error when that tag is already installed. `stew upgrade --all` skips the
binaries you excluded in `stew config`, and a failure for one binary does not
stop the others.

### Stewfile

A `Stewfile` has one entry per line. Each line uses the same form as the
argument to `stew install`:

```
junegunn/fzf@0.29.0
marwanhawari/ppath@v0.0.3
fd:sharkdp/fd
https://example.com/releases/tool-v1.0.0-x86_64-linux.tar.gz
```

When you install from a Stewfile, a failed entry is reported and the rest are
still installed. When you install from a `Stewfile.lock.json`, the first
failure stops the run.

### Configuration

The first time it runs, `stew` asks for two directories:

* **`stewPath`** holds the downloaded assets (`pkg/`), a scratch directory
  (`tmp/`) and the `Stewfile.lock.json` lock file. On Linux and macOS the
  default is `$XDG_DATA_HOME/stew`, or `~/.local/share/stew` if that variable
  is not set. On Windows the default is `AppData\Local\stew`.
* **`stewBinPath`** is where the binaries go. The default is `~/.local/bin`,
  or `AppData\Local\stew\bin` on Windows. stew warns you if this directory is
  not on your `PATH`.

The settings are saved in `stew.config.json`. On Linux and macOS this file is
under `$XDG_CONFIG_HOME/stew`, by default `~/.config/stew`. On Windows it is
under `AppData\Local\stew\Config`.

Set the `GITHUB_TOKEN` environment variable to send authenticated requests to
the GitHub API, which raises its rate limits.

## Limits

* stew does not install or upgrade itself.
* Binaries installed from a plain URL cannot be upgraded. Install the new URL
  instead.
* Search and release lookups use the public GitHub API only. Other code
  hosting services are reached only through direct download URLs.