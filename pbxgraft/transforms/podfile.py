# Podfile text patches.
#
# The Podfile is handled as plain text. Each patch is guarded by a marker
# comment: once the marker is present the patch is never applied again, so a
# patched Podfile is left byte-for-byte unchanged by later runs. A missing
# Podfile is never created here; it belongs to the project generator.

import re
from typing import Optional

from pbxgraft.config import DEPLOYMENT_TARGET_RE, Options
from pbxgraft.descriptor import Part, ProjectDescriptor
from pbxgraft.errors import AlreadyAppliedSkip, PreconditionSkip
from pbxgraft.transforms.base import Transform

FOLLY_FIX_MARKER = "# PBXGRAFT_RCT_FOLLY_FIX"

NEW_ARCH_MARKER = "# PBXGRAFT_DISABLE_RN_NEW_ARCH_IOS"

POST_INSTALL_RE = re.compile(r"post_install do \|installer\|")

NEW_ARCH_RE = re.compile(r"""ENV\[(['"])RCT_NEW_ARCH_ENABLED\1\]\s*=\s*(['"])\d\2""")

FOLLY_FIX_BODY = """
    {marker}
    system('python3', '-m', 'pbxgraft', 'patch-headers', '--pods', installer.sandbox.root.to_s,
           '--deployment-target', '{deployment_target}')

    # Remove Stripe New Architecture sources to avoid FollyConvert.h include errors
    begin
      removed = 0
      installer.pods_project.targets.each do |t|
        next unless t.name =~ /stripe[-_ ]react[-_ ]native/i
        t.build_configurations.each do |config|
          patterns = ['**/NewArch/*', '**/StripeNewArch*']
          existing = config.build_settings['EXCLUDED_SOURCE_FILE_NAMES']
          if existing.is_a?(Array)
            config.build_settings['EXCLUDED_SOURCE_FILE_NAMES'] = (existing + patterns).uniq
          elsif existing.is_a?(String)
            config.build_settings['EXCLUDED_SOURCE_FILE_NAMES'] = (existing.split(/\\s+/) + patterns).uniq.join(' ')
          else
            config.build_settings['EXCLUDED_SOURCE_FILE_NAMES'] = patterns
          end
        end
        phase = t.respond_to?(:sources_build_phase) ? t.sources_build_phase : nil
        next unless phase
        phase.files.to_a.each do |bf|
          ref = bf.respond_to?(:file_ref) ? bf.file_ref : nil
          next unless ref && ref.path
          if ref.path.include?('/NewArch/') || ref.path.include?('StripeNewArch')
            bf.remove_from_project
            removed += 1
          end
        end
      end
      puts "[Stripe NewArch] Excluded NewArch sources; removed #{{removed}} from compile phase"
    rescue => e
      puts "[Stripe NewArch] Cleanup skipped: #{{e}}"
    end

    # Keep every pod on the app's minimum OS version
    installer.pods_project.targets.each do |t|
      t.build_configurations.each do |config|
        config.build_settings['IPHONEOS_DEPLOYMENT_TARGET'] = '{deployment_target}'
      end
    end
"""


def folly_fix_body(deployment_target: str) -> str:
    # Interpolated into Ruby string literals
    if not DEPLOYMENT_TARGET_RE.match(deployment_target):
        raise ValueError(f"invalid deployment_target {deployment_target!r}")
    return FOLLY_FIX_BODY.format(marker=FOLLY_FIX_MARKER, deployment_target=deployment_target)


def apply_folly_fix(text: str, deployment_target: str) -> Optional[str]:
    """
    Add the post-install patch block to Podfile text.

    Returns the new text, or None when the marker is already present. The
    block goes right after the first existing post_install opening line, so
    it runs before whatever that hook already does; without a hook, a new
    one is appended at the end of the file.
    """
    if FOLLY_FIX_MARKER in text:
        return None
    body = folly_fix_body(deployment_target)
    match = POST_INSTALL_RE.search(text)
    if match:
        return text[: match.end()] + body + text[match.end() :]
    return text + f"\n\npost_install do |installer|{body}end\n"


def apply_new_arch_toggle(text: str) -> Optional[str]:
    if NEW_ARCH_MARKER in text:
        if all(m.group(0).endswith(("'0'", '"0"')) for m in NEW_ARCH_RE.finditer(text)):
            return None

    def disable(match: re.Match) -> str:
        key_quote, value_quote = match.group(1), match.group(2)
        line = f"ENV[{key_quote}RCT_NEW_ARCH_ENABLED{key_quote}] = {value_quote}0{value_quote}"
        # Lines tagged on a previous run already carry the marker after them
        tail = text[match.end() :].split("\n", 1)[0]
        if NEW_ARCH_MARKER in tail:
            return line
        return f"{line} {NEW_ARCH_MARKER}"

    if NEW_ARCH_RE.search(text):
        return NEW_ARCH_RE.sub(disable, text)
    return f"{NEW_ARCH_MARKER}\nENV['RCT_NEW_ARCH_ENABLED'] = '0'\n" + text


class FollyFixTransform(Transform):
    name = "podfile-folly-fix"

    def apply(self, descriptor: ProjectDescriptor, options: Options) -> Optional[str]:
        if descriptor.podfile is None:
            raise PreconditionSkip(f"warning: Podfile not found at {descriptor.podfile_path}")
        patched = apply_folly_fix(descriptor.podfile, options.deployment_target)
        if patched is None:
            raise AlreadyAppliedSkip(f"{FOLLY_FIX_MARKER} already present")
        injected = POST_INSTALL_RE.search(descriptor.podfile) is not None
        descriptor.podfile = patched
        descriptor.mark_dirty(Part.PODFILE)
        if injected:
            return "injected into existing post_install hook"
        return "added new post_install hook"


class NewArchTransform(Transform):
    name = "podfile-new-arch"

    def apply(self, descriptor: ProjectDescriptor, options: Options) -> Optional[str]:
        if not options.disable_new_arch:
            raise PreconditionSkip("new architecture toggle not requested")
        if descriptor.podfile is None:
            raise PreconditionSkip(f"warning: Podfile not found at {descriptor.podfile_path}")
        patched = apply_new_arch_toggle(descriptor.podfile)
        if patched is None or patched == descriptor.podfile:
            raise AlreadyAppliedSkip("RCT_NEW_ARCH_ENABLED already disabled")
        descriptor.podfile = patched
        descriptor.mark_dirty(Part.PODFILE)
        return "set RCT_NEW_ARCH_ENABLED to 0"
