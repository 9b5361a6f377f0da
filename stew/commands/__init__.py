"""The stew subcommands: install, search, browse, upgrade, uninstall, rename, list and config."""