r"""
示例源码模板
Example source templates.

模板中的 "\t" 是字面转义，生成时会展开为制表符；占位符使用 str.format。
"\t" in a template is a literal escape expanded to a tab on generation;
placeholders use str.format, so the templates must not contain other braces.

命令模板: {0} = 首字母大写的命令名
插件模板: {0} = 插件名, {1} = 作者, {2} = 宿主版本
"""

PYTHON_COMMAND_SKELETON = r'''"""
\tAuto-generated command skeleton.

\tThe class must be named Cmd{0} and this file Cmd{0}.py.
\tExtra modules can be imported by adding "#reference <module>" lines
\tat the very top of this file.

\tTo learn how to write commands, read the AetherForge documentation.
"""
from AetherForge.extensions import Command


class Cmd{0}(Command):
\t# The command's name (what you put after a slash to use this command)
\tname = "{0}"

\t# Command's shortcut, can be left blank (e.g. "/copy" has a shortcut of "c")
\tshortcut = ""

\t# Which submenu this command displays in under /help
\tcategory = "other"

\t# Whether or not this command can be used in a museum
\tmuseum_usable = False

\t# The default rank required to use this command
\tdefault_rank = "guest"

\t# This is for when a player executes this command by doing /{0}
\t# player is the player object for the player executing the command.
\t# message is the arguments given to the command.
\tdef use(self, player, message):
\t\tplayer.message("Hello World!")

\t# This is for when a player does /help {0}
\tdef help(self, player):
\t\tplayer.message("/{0} - Does stuff. Example command.")
'''

PYTHON_PLUGIN_SKELETON = r'''"""
\t{0} plugin, created by {1}.

\tPlugins are loaded from the plugins folder when the server starts,
\tor on demand with /pload {0}.
"""
from AetherForge.extensions import Plugin


class {0}(Plugin):
\tname = "{0}"
\tcreator = "{1}"
\t# The oldest server version this plugin works with
\tserver_version = "{2}"

\tdef load(self, startup):
\t\t# Called when the plugin is activated
\t\tpass

\tdef unload(self, shutdown):
\t\t# Called when the plugin is deactivated
\t\tpass

\tdef help(self, player):
\t\tplayer.message("No help is available for this plugin.")
'''

HY_COMMAND_SKELETON = r''';; Auto-generated command skeleton.
;;
;; The class must be named Cmd{0} and this file Cmd{0}.hy.
;; Extra modules can be imported by adding ";reference <module>" lines
;; at the very top of this file.

(import AetherForge.extensions [Command])

(defclass Cmd{0} [Command]
\t(setv name "{0}")
\t(setv shortcut "")
\t(setv category "other")
\t(setv museum_usable False)
\t(setv default_rank "guest")

\t(defn use [self player message]
\t\t(.message player "Hello World!"))

\t(defn help [self player]
\t\t(.message player "/{0} - Does stuff. Example command.")))
'''

HY_PLUGIN_SKELETON = r''';; {0} plugin, created by {1}.

(import AetherForge.extensions [Plugin])

(defclass {0} [Plugin]
\t(setv name "{0}")
\t(setv creator "{1}")
\t(setv server_version "{2}")

\t(defn load [self startup]
\t\tNone)

\t(defn unload [self shutdown]
\t\tNone)

\t(defn help [self player]
\t\t(.message player "No help is available for this plugin.")))
'''
